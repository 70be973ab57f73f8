"""Reputable source allow-list used when a request sets reputable_only.

Reputable sources are:
1. Government agencies (.gov, .mil, and well-known national statistics offices)
2. Academic institutions (.edu, .ac.uk, ...)
3. International organizations (.int, UN agencies, World Bank, IMF, OECD)
4. Established research organizations (Pew, Gallup, RAND, ...)
5. Peer-reviewed publishers (Nature, Science, The Lancet, ...)
"""

from typing import FrozenSet, Tuple
from urllib.parse import urlparse

# Known reputable domains (lowercase, without "www.")
REPUTABLE_DOMAINS: FrozenSet[str] = frozenset({
    # Research organizations
    "pewresearch.org",
    "gallup.com",
    "rand.org",
    "brookings.edu",
    "kff.org",
    "urban.org",
    "nber.org",
    "ourworldindata.org",
    "statista.com",

    # International organizations
    "who.int",
    "un.org",
    "worldbank.org",
    "imf.org",
    "oecd.org",
    "unesco.org",
    "unicef.org",
    "ilo.org",
    "wto.org",
    "iea.org",
    "ipcc.ch",

    # National statistics offices outside .gov
    "ons.gov.uk",
    "statcan.gc.ca",
    "abs.gov.au",
    "ec.europa.eu",
    "eurostat.ec.europa.eu",

    # Peer-reviewed publishers and journals
    "nature.com",
    "science.org",
    "thelancet.com",
    "nejm.org",
    "bmj.com",
    "jamanetwork.com",
    "pnas.org",
    "cell.com",
    "springer.com",
    "sciencedirect.com",
    "ncbi.nlm.nih.gov",
})

# Domain suffixes treated as reputable regardless of the exact host
REPUTABLE_SUFFIXES: Tuple[str, ...] = (
    ".gov",
    ".mil",
    ".edu",
    ".int",
    ".gov.uk",
    ".ac.uk",
    ".edu.au",
    ".gc.ca",
    ".europa.eu",
)


def normalize_domain(value: str) -> str:
    """Return the lowercase host of a URL or domain, without "www."."""
    value = (value or "").strip().lower()
    if "://" in value:
        value = urlparse(value).netloc
    value = value.split(":", 1)[0]
    if value.startswith("www."):
        value = value[4:]
    return value


def is_reputable(domain_or_url: str) -> bool:
    """Check a domain (or URL) against the reputable allow-list.

    Subdomains of listed domains match (data.worldbank.org -> worldbank.org).
    """
    domain = normalize_domain(domain_or_url)
    if not domain:
        return False
    if domain.endswith(REPUTABLE_SUFFIXES):
        return True
    parts = domain.split(".")
    for i in range(len(parts) - 1):
        if ".".join(parts[i:]) in REPUTABLE_DOMAINS:
            return True
    return False
