"""Catalogue of central government schemes for farmers."""
from typing import List, Optional

from krishiai.errors import SchemeNotFound
from krishiai.schemas import GovernmentScheme

SCHEMES = [
    GovernmentScheme(
        id="pm-kisan",
        title="Pradhan Mantri Kisan Samman Nidhi (PM-KISAN)",
        description="A central sector scheme with 100% funding from the Government of India. It aims to supplement "
                    "the financial needs of the Small and Marginal Farmers (SMFs).",
        eligibility="All landholding farmer families, subject to certain exclusion criteria.",
        benefits=["Income support of Rs. 6,000/- per year in three equal installments."],
        link="https://pmkisan.gov.in/",
    ),
    GovernmentScheme(
        id="fasal-bima",
        title="Pradhan Mantri Fasal Bima Yojana (PMFBY)",
        description="Provides comprehensive insurance coverage against crop failure, helping to stabilize the income "
                    "of farmers.",
        eligibility="All farmers including sharecroppers and tenant farmers growing notified crops in the notified "
                    "areas are eligible for coverage.",
        benefits=["Financial support in case of crop loss/damage.", "Uniform premium rates."],
        link="https://pmfby.gov.in/",
    ),
    GovernmentScheme(
        id="soil-health-card",
        title="Soil Health Card Scheme",
        description="A scheme to provide farmers with soil health cards, which contain information about the nutrient "
                    "status of their soil along with recommendations on the appropriate dosage of nutrients to be "
                    "applied for improving soil health and fertility.",
        eligibility="All farmers are eligible to get the Soil Health Card.",
        benefits=[
            "Information on soil nutrient status.",
            "Recommendations for fertilizer application.",
            "Improved crop yield and soil health.",
        ],
        link="https://soilhealth.dac.gov.in/",
    ),
    GovernmentScheme(
        id="kcc",
        title="Kisan Credit Card (KCC)",
        description="A scheme aimed at providing adequate and timely credit support from the banking system under a "
                    "single window to the farmers for their cultivation & other needs.",
        eligibility="Farmers - individual/joint borrowers who are owner cultivators; Tenant farmers, Oral lessees & "
                    "Share Croppers; SHGs or Joint Liability Groups of farmers including tenant farmers, share "
                    "croppers etc.",
        benefits=[
            "Access to credit at lower interest rates.",
            "Flexible repayment options.",
            "Coverage for various agricultural and allied activities.",
        ],
        # general RBI page; bank-specific links vary
        link="https://www.rbi.org.in/",
    ),
]


def get_government_schemes(query: Optional[str] = None) -> List[GovernmentScheme]:
    if not query or not query.strip():
        return list(SCHEMES)
    needle = query.strip().lower()
    out = []
    for scheme in SCHEMES:
        haystack = " ".join([scheme.title, scheme.description, *scheme.benefits]).lower()
        if needle in haystack:
            out.append(scheme)
    return out


def get_scheme(scheme_id: str) -> GovernmentScheme:
    for scheme in SCHEMES:
        if scheme.id == scheme_id:
            return scheme
    raise SchemeNotFound(f"No scheme found with id {scheme_id}.")
