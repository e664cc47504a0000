# ==============================================================================
# quotacheck/validator/regions.py
# ------------------------------------------------------------------------------
# Static region lookup tables. These are configuration data: the defaults
# below can be overridden key-by-key from a JSON file.
# ==============================================================================

import json
import logging

from .errors import RegionTableError

APAC = 'APAC'
EMEAL = 'EMEAL'
NAMER = 'NAMER'
REGIONS = [APAC, EMEAL, NAMER]

COUNTRY_REGION_MAP = {
    'Australia': APAC,
    'Austria': EMEAL,
    'Belgium': EMEAL,
    'Brazil': EMEAL,
    'Canada': NAMER,
    'China': APAC,
    'France': EMEAL,
    'Germany': EMEAL,
    'Hong Kong': APAC,
    'India': APAC,
    'Ireland': EMEAL,
    'Israel': EMEAL,
    'Italy': EMEAL,
    'Japan': APAC,
    'Malaysia': APAC,
    'Mexico': EMEAL,
    'Netherlands': EMEAL,
    'Singapore': APAC,
    'Spain': EMEAL,
    'Sweden': EMEAL,
    'United Arab Emirates': EMEAL,
    'United Kingdom': EMEAL,
    'United States of America': NAMER,
}

# ISO 2-letter country codes, used when a market segment holds a country code.
COUNTRY_CODE_REGION_MAP = {
    'AU': APAC, 'AT': EMEAL, 'BE': EMEAL, 'BR': EMEAL, 'CA': NAMER,
    'CN': APAC, 'FR': EMEAL, 'DE': EMEAL, 'HK': APAC, 'IN': APAC,
    'IE': EMEAL, 'IL': EMEAL, 'IT': EMEAL, 'JP': APAC, 'MY': APAC,
    'MX': EMEAL, 'NL': EMEAL, 'SG': APAC, 'ES': EMEAL, 'SE': EMEAL,
    'AE': EMEAL, 'GB': EMEAL, 'UK': EMEAL, 'US': NAMER, 'KR': APAC,
    'TW': APAC, 'TH': APAC, 'NZ': APAC, 'PH': APAC, 'ID': APAC,
    'VN': APAC, 'AR': EMEAL, 'CL': EMEAL, 'CO': EMEAL, 'PE': EMEAL,
    'ZA': EMEAL, 'SA': EMEAL, 'TR': EMEAL, 'PL': EMEAL, 'CZ': EMEAL,
    'NO': EMEAL, 'DK': EMEAL, 'FI': EMEAL, 'PT': EMEAL, 'CH': EMEAL,
    'RO': EMEAL, 'HU': EMEAL,
}

# Market segment values that name a region directly.
MARKET_SEGMENT_REGION_MAP = {
    'APAC': APAC,
    'EMEAL': EMEAL,
    'EMEA': EMEAL,
    'LATAM': EMEAL,
    'NAMER': NAMER,
}

# LMS geography codes, used when an employee is missing from the roster.
GEO_REGION_MAP = {
    'APAC': APAC,
    'EMEA': EMEAL,
    'LATAM': EMEAL,
    'NAMER': NAMER,
}
# Geography code whose records belong to every region.
ALWAYS_INCLUDED_GEO = 'SA'


class RegionTables:
    """
    Holds the lookup tables a validation run resolves regions with.

    Each table may be replaced or extended through the constructor; tables
    that are not given fall back to the module defaults.
    """

    def __init__(self, countries=None, country_codes=None, segments=None, geos=None,
                 always_included_geo=ALWAYS_INCLUDED_GEO):
        self.countries = dict(COUNTRY_REGION_MAP)
        self.country_codes = dict(COUNTRY_CODE_REGION_MAP)
        self.segments = dict(MARKET_SEGMENT_REGION_MAP)
        self.geos = dict(GEO_REGION_MAP)
        self.always_included_geo = str(always_included_geo).strip().upper()

        # Codes, segments and geos are looked up upper-cased; country names as written.
        for table, overrides, upper_keys in ((self.countries, countries, False),
                                             (self.country_codes, country_codes, True),
                                             (self.segments, segments, True),
                                             (self.geos, geos, True)):
            if not overrides:
                continue
            if not isinstance(overrides, dict):
                raise RegionTableError(f"Lookup table override must map names to regions, got: {overrides!r}")
            unknown = {k: v for k, v in overrides.items() if v not in REGIONS}
            if unknown:
                raise RegionTableError(f"Unknown region(s) in lookup table override: {unknown}")
            for key, region in overrides.items():
                key = str(key).strip()
                table[key.upper() if upper_keys else key] = region

    @classmethod
    def from_file(cls, path):
        """
        Builds tables from a JSON file with optional 'countries', 'country_codes',
        'segments', 'geos' and 'always_included_geo' keys.

        Raises:
            RegionTableError: If the file cannot be read, is not a JSON object
                or names an unknown region.
        """
        try:
            with open(path, encoding='utf-8') as fh:
                data = json.load(fh)
        except OSError as e:
            raise RegionTableError(f"Cannot read region tables '{path}': {e.strerror or e}") from e
        except json.JSONDecodeError as e:
            raise RegionTableError(f"Region tables '{path}' are not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise RegionTableError(f"Region tables '{path}' must hold a JSON object.")
        logging.debug(f"Region table overrides read from {path}: {sorted(data)}")
        return cls(
            countries=data.get('countries'),
            country_codes=data.get('country_codes'),
            segments=data.get('segments'),
            geos=data.get('geos'),
            always_included_geo=data.get('always_included_geo', ALWAYS_INCLUDED_GEO),
        )

    def countries_for_region(self, region):
        """Returns the set of country names that belong to a region."""
        return {country for country, r in self.countries.items() if r == region}

    def region_of_country(self, country):
        return self.countries.get(country) if country else None
