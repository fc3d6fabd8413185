"""
Pricing Module - GST Jurisdiction
==================================
Decides intra-state (CGST + SGST) vs inter-state (IGST) treatment for a taxable
amount and splits the GST accordingly. Also carries the GSTIN / state-code
helpers used by invoices and reseller profiles.

Policy notes (kept exactly, pending product-owner review):
  * gst_rate <= 0 disables GST; the breakdown then reports is_same_state=True
    with every rate and amount at zero.
  * A missing company or reseller state code is treated as inter-state (IGST).
"""

from dataclasses import dataclass, asdict
from decimal import Decimal
from typing import Optional

from common.helpers import to_decimal

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# GST state codes (first two digits of a GSTIN)
STATE_CODES = {
    "01": "Jammu and Kashmir",
    "02": "Himachal Pradesh",
    "03": "Punjab",
    "04": "Chandigarh",
    "05": "Uttarakhand",
    "06": "Haryana",
    "07": "Delhi",
    "08": "Rajasthan",
    "09": "Uttar Pradesh",
    "10": "Bihar",
    "11": "Sikkim",
    "12": "Arunachal Pradesh",
    "13": "Nagaland",
    "14": "Manipur",
    "15": "Mizoram",
    "16": "Tripura",
    "17": "Meghalaya",
    "18": "Assam",
    "19": "West Bengal",
    "20": "Jharkhand",
    "21": "Odisha",
    "22": "Chhattisgarh",
    "23": "Madhya Pradesh",
    "24": "Gujarat",
    "26": "Dadra and Nagar Haveli",
    "27": "Maharashtra",
    "29": "Karnataka",
    "30": "Goa",
    "31": "Lakshadweep",
    "32": "Kerala",
    "33": "Tamil Nadu",
    "34": "Puducherry",
    "35": "Andaman and Nicobar",
    "36": "Telangana",
    "37": "Andhra Pradesh",
    "38": "Ladakh",
}


@dataclass(frozen=True)
class GstBreakdown:
    is_gst_enabled: bool
    is_same_state: bool
    total_gst_rate: Decimal
    cgst_rate: Decimal
    sgst_rate: Decimal
    igst_rate: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    igst_amount: Decimal
    total_gst_amount: Decimal
    company_state_code: Optional[str] = None
    reseller_state_code: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


def normalize_state_code(code: Optional[str]) -> Optional[str]:
    """Trim + upper-case a state code; blank -> None."""
    if code is None:
        return None
    code = str(code).strip().upper()
    return code or None


def calculate_gst_breakdown(
    taxable_amount,
    gst_rate,
    company_state_code: Optional[str],
    reseller_state_code: Optional[str],
) -> GstBreakdown:
    """
    Split GST on `taxable_amount` by jurisdiction.

    Same (case-insensitive) state code on both sides -> CGST and SGST at half
    the rate each. Different or missing codes -> a single IGST at the full rate.
    Negative taxable amounts are taxed as-is (negative GST).
    """
    taxable = to_decimal(taxable_amount)
    rate = to_decimal(gst_rate)

    if rate <= ZERO:
        return GstBreakdown(
            is_gst_enabled=False,
            is_same_state=True,
            total_gst_rate=ZERO,
            cgst_rate=ZERO,
            sgst_rate=ZERO,
            igst_rate=ZERO,
            cgst_amount=ZERO,
            sgst_amount=ZERO,
            igst_amount=ZERO,
            total_gst_amount=ZERO,
        )

    company = normalize_state_code(company_state_code)
    reseller = normalize_state_code(reseller_state_code)
    is_same_state = company is not None and company == reseller

    if is_same_state:
        cgst_rate = sgst_rate = rate / 2
        igst_rate = ZERO
    else:
        cgst_rate = sgst_rate = ZERO
        igst_rate = rate

    cgst_amount = taxable * cgst_rate / HUNDRED
    sgst_amount = taxable * sgst_rate / HUNDRED
    igst_amount = taxable * igst_rate / HUNDRED

    return GstBreakdown(
        is_gst_enabled=True,
        is_same_state=is_same_state,
        total_gst_rate=rate,
        cgst_rate=cgst_rate,
        sgst_rate=sgst_rate,
        igst_rate=igst_rate,
        cgst_amount=cgst_amount,
        sgst_amount=sgst_amount,
        igst_amount=igst_amount,
        total_gst_amount=cgst_amount + sgst_amount + igst_amount,
        company_state_code=company,
        reseller_state_code=reseller,
    )


# ==========================================
# GSTIN / State Code Helpers
# ==========================================

def extract_state_code_from_gstin(gst_number: Optional[str]) -> Optional[str]:
    """GSTIN = 2-digit state code + 10-char PAN + 3 chars."""
    if not gst_number:
        return None
    gst_number = gst_number.strip()
    if len(gst_number) < 2:
        return None
    return gst_number[:2]


def get_state_name(state_code: Optional[str]) -> Optional[str]:
    if not state_code:
        return None
    return STATE_CODES.get(state_code.strip())


def is_valid_state_code(state_code: Optional[str]) -> bool:
    return get_state_name(state_code) is not None


def invoice_title(is_gst_enabled: bool) -> str:
    return "Tax Invoice" if is_gst_enabled else "Estimate"


def format_gstin_for_display(gst_number: Optional[str]) -> str:
    """'27AAAAA0000A1Z5' -> '27 AAAAA 0000 A1Z5'."""
    if not gst_number:
        return "N/A"
    if len(gst_number) == 15:
        return f"{gst_number[:2]} {gst_number[2:7]} {gst_number[7:11]} {gst_number[11:]}"
    return gst_number
