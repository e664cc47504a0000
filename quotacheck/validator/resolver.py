# ==============================================================================
# quotacheck/validator/resolver.py
# ------------------------------------------------------------------------------
# Decides which region a quota record belongs to. Each rule either settles
# the record or passes it on; the order of the rules decides which records
# are silently kept or dropped, so it must not change.
# ==============================================================================

import logging
from collections import namedtuple

MATCH_ROSTER = 'roster_country_match'
MATCH_ROSTER_MISMATCH = 'roster_country_mismatch'
MATCH_SEGMENT_DIRECT = 'segment_direct'
MATCH_SEGMENT_COUNTRY_CODE = 'segment_country_code'
MATCH_UNRESOLVED = 'unresolved'

RegionResolution = namedtuple('RegionResolution', ['included', 'match_type', 'comment'])


def _placeholder_rule(record, refs, tables, valid_countries, region):
    if record.is_placeholder:
        return RegionResolution(True, MATCH_UNRESOLVED, 'TBH / Blank EID')
    return None


def _roster_match_rule(record, refs, tables, valid_countries, region):
    for ref in refs:
        if ref.country is not None and ref.country in valid_countries:
            return RegionResolution(True, MATCH_ROSTER, f"SCR: {ref.country}")
    return None


def _roster_mismatch_rule(record, refs, tables, valid_countries, region):
    # Only the first roster entry is consulted; a blank or unmapped
    # country there falls through to the market segment.
    if not refs:
        return None
    country = refs[0].country
    other_region = tables.region_of_country(country)
    if other_region and other_region != region:
        return RegionResolution(
            False, MATCH_ROSTER_MISMATCH,
            f'SCR Country "{country}" belongs to {other_region}, not {region}')
    return None


def _segment_direct_rule(record, refs, tables, valid_countries, region):
    segment = record.rep_region.strip()
    direct = tables.segments.get(segment.upper())
    if direct is None:
        return None
    if direct == region:
        return RegionResolution(True, MATCH_SEGMENT_DIRECT, f"Market Segment: {segment}")
    return RegionResolution(False, MATCH_SEGMENT_DIRECT,
                            f'Market Segment "{segment}" → {direct}, not {region}')


def _segment_country_code_rule(record, refs, tables, valid_countries, region):
    segment = record.rep_region.strip()
    if len(segment) != 2:
        return None
    code_region = tables.country_codes.get(segment.upper())
    if code_region is None:
        return None
    if code_region == region:
        return RegionResolution(True, MATCH_SEGMENT_COUNTRY_CODE,
                                f'Market Segment "{segment}" → country code → {code_region}')
    return RegionResolution(False, MATCH_SEGMENT_COUNTRY_CODE,
                            f'Market Segment "{segment}" → {code_region}, not {region}')


def _unresolved_rule(record, refs, tables, valid_countries, region):
    return RegionResolution(
        True, MATCH_UNRESOLVED,
        f'Region unconfirmed: EID not in SCR, Market Segment "{record.rep_region.strip()}" '
        f'not recognized as a region or country code')


RESOLUTION_RULES = (
    _placeholder_rule,
    _roster_match_rule,
    _roster_mismatch_rule,
    _segment_direct_rule,
    _segment_country_code_rule,
    _unresolved_rule,
)


def resolve_region(record, roster_index, valid_countries, region, tables):
    """
    Resolves whether a quota record belongs to the selected region.

    Args:
        record (QuotaRecord): The record to place.
        roster_index (dict): Identifier -> list of ReferenceRecord.
        valid_countries (set): Countries of the selected region.
        region (str): The selected region.
        tables (RegionTables): Lookup tables for segments and country codes.

    Returns:
        RegionResolution: Inclusion flag, match type and a justification.
    """
    refs = roster_index.get(record.eid, [])
    # The last rule always settles the record.
    for rule in RESOLUTION_RULES:
        resolution = rule(record, refs, tables, valid_countries, region)
        if resolution is not None:
            break
    logging.debug(f"Row {record.key} ({record.eid or 'blank'}): {resolution.match_type} -> "
                  f"{'included' if resolution.included else 'excluded'}")
    return resolution


def lms_record_in_region(record, roster_index, valid_countries, region, tables):
    """
    Region filter for LMS records.

    Placeholder identities are kept so they can be reported as skipped.
    Employees on the roster are kept when any roster entry has a country in
    the region; employees missing from the roster are placed by their
    geography code, and the always-included code is kept for every region.
    """
    if record.is_placeholder:
        return True
    refs = roster_index.get(record.employee_id)
    if not refs:
        geo = record.geo.upper()
        if geo == tables.always_included_geo:
            return True
        return tables.geos.get(geo) == region
    return any(ref.country is not None and ref.country in valid_countries for ref in refs)
