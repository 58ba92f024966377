from __future__ import annotations

import urllib.parse

SOLSCAN = "https://solscan.io"


def short_addr(a: str) -> str:
    if not a or len(a) < 10:
        return a or ""
    return f"{a[:4]}…{a[-4:]}"


def explorer_tx_link(signature: str) -> str:
    if not signature or signature == "n/a":
        return ""
    return f"{SOLSCAN}/tx/{signature}"


def explorer_account_link(address: str) -> str:
    return f"{SOLSCAN}/account/{address}" if address else ""


def explorer_token_link(mint: str) -> str:
    return f"{SOLSCAN}/token/{mint}" if mint else ""


def phantom_caip19_solana(mint: str) -> str:
    # CAIP-19 format used by Phantom deeplinks
    return f"solana:101/address:{mint}"


def phantom_fungible_link_solana(mint: str) -> str:
    token = urllib.parse.quote(phantom_caip19_solana(mint), safe="")
    return f"https://phantom.app/ul/v1/fungible?token={token}"
