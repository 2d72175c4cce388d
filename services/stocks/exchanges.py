"""Listing metadata inferred from Yahoo-style ticker suffixes (".AS", ".DE", ...)."""
from __future__ import annotations

import re
from typing import Dict, Tuple

DEFAULT_EU_SYMBOLS = ("ASML.AS", "SAP.DE", "LVMH.PA", "NESN.SW", "NOVO-B.CO", "TTE.PA", "UNA.AS", "SIE.DE")

# suffix -> (country, exchange, currency)
_SUFFIXES: Dict[str, Tuple[str, str, str]] = {
    ".AS": ("Netherlands", "Euronext Amsterdam", "EUR"),
    ".DE": ("Germany", "XETRA", "EUR"),
    ".PA": ("France", "Euronext Paris", "EUR"),
    ".L": ("UK", "London Stock Exchange", "GBP"),
    ".SW": ("Switzerland", "SIX Swiss Exchange", "CHF"),
    ".CO": ("Denmark", "Nasdaq Copenhagen", "DKK"),
    ".ST": ("Sweden", "Nasdaq Stockholm", "SEK"),
    ".OL": ("Norway", "Oslo Børs", "NOK"),
    ".MI": ("Italy", "Borsa Italiana", "EUR"),
    ".MC": ("Spain", "BME Spanish Exchanges", "EUR"),
}
_UNKNOWN = ("Europe", "European Exchange", "EUR")

COMPANY_NAMES: Dict[str, str] = {
    "ASML.AS": "ASML Holding N.V.",
    "SAP.DE": "SAP SE",
    "LVMH.PA": "LVMH Moët Hennessy Louis Vuitton",
    "NESN.SW": "Nestlé S.A.",
    "NOVO-B.CO": "Novo Nordisk A/S",
    "TTE.PA": "TotalEnergies SE",
    "UNA.AS": "Unilever N.V.",
    "SIE.DE": "Siemens AG",
    "MC.PA": "LVMH",
    "OR.PA": "L'Oréal S.A.",
    "AIR.PA": "Airbus SE",
    "SAN.PA": "Sanofi S.A.",
    "BNP.PA": "BNP Paribas S.A.",
    "AZN.L": "AstraZeneca PLC",
    "SHEL.L": "Shell plc",
    "UL.L": "Unilever PLC",
    "VOD.L": "Vodafone Group Plc",
    "BP.L": "BP p.l.c.",
}

_SUFFIX_RE = re.compile(r"\.[A-Z]+$")


def _listing(symbol: str) -> Tuple[str, str, str]:
    upper = (symbol or "").upper()
    for suffix, listing in _SUFFIXES.items():
        if upper.endswith(suffix):
            return listing
    return _UNKNOWN


def country_for(symbol: str) -> str:
    return _listing(symbol)[0]


def exchange_for(symbol: str) -> str:
    return _listing(symbol)[1]


def currency_for(symbol: str) -> str:
    return _listing(symbol)[2]


def company_name(symbol: str) -> str:
    return COMPANY_NAMES.get(symbol) or _SUFFIX_RE.sub("", symbol)
