"""Keyword-based business categorization of transaction descriptions."""

from .models import TransactionCategory

# =============================================================================
# CATEGORY RULES
# =============================================================================

# Priority list: the first category with any keyword contained in the
# lower-cased description wins. Specific categories sit above generic ones
# (Bank Charges above Cash Withdrawal so "ATM FEE" is a charge, Food &
# Groceries above Shopping so "grocery store" is food, Salary above Business
# Income). Reordering changes classification results.
CATEGORY_RULES: list[tuple[TransactionCategory, tuple[str, ...]]] = [
    (TransactionCategory.SALARY, (
        "salary", "payroll", "wage", "stipend", "allowance",
    )),
    (TransactionCategory.LOAN_CREDIT, (
        "loan", "repayment", "credit card", "overdraft", "mortgage",
        "carbon", "fairmoney", "renmoney",
    )),
    (TransactionCategory.INSURANCE, (
        "insurance", "premium", "axa mansard", "leadway", "aiico",
    )),
    (TransactionCategory.BANK_CHARGES, (
        "charge", "fee", "commission", "levy", "stamp duty", "sms alert",
        "account maintenance", "vat on",
    )),
    (TransactionCategory.CASH_WITHDRAWAL, (
        "atm", "withdrawal", "cash",
    )),
    (TransactionCategory.UTILITIES, (
        "electric", "nepa", "phcn", "ikedc", "ekedc", "prepaid meter",
        "water", "internet", "phone", "airtime", "data", "dstv", "gotv",
        "mtn", "airtel", "9mobile", "utility",
    )),
    (TransactionCategory.FOOD_GROCERIES, (
        "grocery", "groceries", "food", "restaurant", "supermarket",
        "shoprite", "eatery", "chicken republic", "kitchen",
    )),
    (TransactionCategory.TRANSPORTATION, (
        "fuel", "petrol", "diesel", "transport", "uber", "bolt", "taxi",
        "bus fare", "flight", "airline", "toll", "parking",
    )),
    (TransactionCategory.HEALTHCARE, (
        "hospital", "medical", "pharmacy", "clinic", "health", "drug",
        "lab test",
    )),
    (TransactionCategory.EDUCATION, (
        "school", "education", "tuition", "university", "college",
        "course", "training", "books",
    )),
    (TransactionCategory.ENTERTAINMENT, (
        "netflix", "spotify", "showmax", "cinema", "movie", "game",
        "betting", "bet9ja", "sportybet", "event", "ticket",
    )),
    (TransactionCategory.SHOPPING, (
        "shopping", "store", "mall", "jumia", "konga", "amazon", "market",
        "boutique", "purchase",
    )),
    (TransactionCategory.INVESTMENT, (
        "investment", "savings", "dividend", "interest", "stock", "shares",
        "treasury", "mutual fund", "piggyvest", "cowrywise", "risevest",
    )),
    (TransactionCategory.BUSINESS_INCOME, (
        "transfer from", "trf from", "payment received", "deposit", "inward",
        "sales", "invoice", "customer",
    )),
]


def categorize(description: str) -> TransactionCategory:
    """Map a description to a business category.

    Case-insensitive substring containment only; no tokenization or
    stemming.

    Args:
        description: Transaction narration, raw or cleaned.

    Returns:
        First matching category, or UNCATEGORIZED.
    """
    desc_lower = (description or "").lower()

    for category, keywords in CATEGORY_RULES:
        if any(keyword in desc_lower for keyword in keywords):
            return category

    return TransactionCategory.UNCATEGORIZED
