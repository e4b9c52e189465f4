"""
Keyword Vocabulary for the Utterance Classifier

All tables here are read-only module constants. The classifier holds no
other state, which is what makes it safe to call from any number of
threads or tasks at once.

Spellings are the Latin-script forms that speech-to-text engines and
people typing on phones actually produce. Where a word has a common
variant spelling both are listed; the normalizer folds the most frequent
variants to one canonical form before any of these tables are consulted.
"""

from types import MappingProxyType

# =============================================================================
# NUMERALS
# =============================================================================

NUMERAL_WORDS = MappingProxyType({
    # 1-10
    "ek": 1,
    "do": 2, "doh": 2,
    "teen": 3, "tin": 3,
    "char": 4, "chaar": 4,
    "paanch": 5, "panch": 5,
    "chhe": 6, "chhah": 6, "che": 6,
    "saat": 7, "sat": 7,
    "aath": 8, "ath": 8,
    "nau": 9, "nao": 9,
    "das": 10, "dus": 10,
    # 11-19
    "gyarah": 11, "gyara": 11,
    "barah": 12, "bara": 12,
    "terah": 13, "tera": 13,
    "chaudah": 14, "chauda": 14,
    "pandrah": 15, "pandra": 15,
    "solah": 16, "sola": 16,
    "satrah": 17, "satra": 17,
    "atharah": 18, "athara": 18,
    "unnis": 19, "unees": 19,
    # tens
    "bees": 20, "bis": 20,
    "tees": 30, "tis": 30,
    "chaalees": 40, "chalis": 40,
    "pachaas": 50, "pachas": 50,
    "saath": 60, "sath": 60,
    "sattar": 70, "sattur": 70,
    "assi": 80, "asi": 80,
    "nabbe": 90, "nabbey": 90,
    # multiplier-class
    "sau": 100, "hundred": 100,
    "hazaar": 1000, "hazar": 1000, "thousand": 1000,
    "lakh": 100000, "lac": 100000,
})

MULTIPLIER_WORDS = MappingProxyType({
    word: value for word, value in NUMERAL_WORDS.items() if value >= 100
})

# Words that can stand in front of a multiplier ("paanch" in "paanch sau")
UNIT_NUMERAL_WORDS = MappingProxyType({
    word: value for word, value in NUMERAL_WORDS.items() if value < 100
})


# =============================================================================
# NORMALIZATION
# =============================================================================

# (pattern, replacement) pairs, applied in order on lowercased text.
# Every pattern is word-bounded and no replacement is itself matched by
# any pattern, so applying the list twice changes nothing.
SPELLING_FOLDS = (
    (r"\b(?:rupees?|rupy|rupay|rupiya|rupaiya|rupaiye|rupya)\b", "rupaye"),
    (r"\b(?:rs|inr)(?=\d|\b)\.?", "rupaye"),
    (r"\budhaar\b", "udhar"),
    (r"\bkharach\b", "kharcha"),
    (r"\bbechi\b", "becha"),
    (r"\bhuyi\b", "hui"),
    (r"\b(?:hazar|hajar|hajaar|hazzar)\b", "hazaar"),
    (r"\b(?:lac|laakh|lakhs)\b", "lakh"),
)

CURRENCY_SYMBOLS = ("₹",)


# =============================================================================
# INTENT ROUTING
# =============================================================================

QUERY_KEYWORDS = frozenset({
    # Hinglish
    "kitna", "kitni", "kitne", "batao", "bataye", "bataiye", "bata do",
    "dikhao", "dikha do", "kya", "hisaab batao", "summary", "balance",
    # English
    "how much", "show", "tell me", "what is", "what's",
})

# "total" makes an utterance a query only next to one of these
CATEGORY_WORDS = frozenset({
    "bikri", "sale", "sales", "kharcha", "kharche", "expense", "expenses",
    "profit", "loss", "munafa", "nuksaan", "aamdani", "income",
})


# =============================================================================
# TRANSACTION KEYWORDS
# =============================================================================

LOAN_WORDS = frozenset({"udhar", "loan", "karz", "karza", "qarz"})

LOAN_TAKEN_PHRASES = (
    "udhar liya", "udhar liye", "udhar li", "udhar mila", "udhar mile",
    "loan liya", "loan liye", "loan mila",
    "liya udhar", "liye udhar", "li udhar", "liya loan", "liye loan",
    "loan taken", "borrowed", "credit received",
)

LOAN_GIVEN_PHRASES = (
    "udhar diya", "udhar diye", "udhar di", "udhar de diya",
    "loan diya", "loan diye",
    "diya udhar", "diye udhar", "di udhar", "diya loan", "diye loan",
    "loan given", "lent", "credit out",
)

TAKING_VERBS = frozenset({"liya", "liye", "li", "lena", "mila", "mile"})
GIVING_VERBS = frozenset({"diya", "diye", "di", "dena", "de"})

EXPENSE_KEYWORDS = (
    # Hinglish
    "kharcha", "kharch", "kharche", "bill", "bijli", "kiraya", "bhada",
    "petrol", "diesel", "recharge", "tankhwah", "salary", "chai",
    "kharida", "khareeda", "saman liya", "maal liya", "stock liya",
    "payment kiya", "bill bhara", "bill bhar diya",
    # English
    "expense", "rent", "paid", "spent", "spend", "cost", "purchase",
    "electricity", "fuel", "wages",
)

SALE_KEYWORDS = (
    # Hinglish
    "bikri", "becha", "bech", "bechna", "biki", "bik gaya", "aamdani", "kamai",
    # English
    "sale", "sales", "sold", "revenue", "income",
)

CREDIT_VERBS = (
    "mila", "mile", "aaya", "aya", "aaye", "jama", "paisa aaya",
    "received", "receive", "got", "credited",
)

DEBIT_VERBS = (
    "bhar diya", "bhara", "de diya", "nikal gaya", "kharcha kiya",
    "payment", "outflow",
)

COMPLETION_MARKERS = frozenset({"hui", "hua"})


# =============================================================================
# PARTY NAMES
# =============================================================================

# Tokens that sit before se/ko/ka but are never a person's name
PARTY_STOPLIST = frozenset({
    # time words
    "aaj", "kal", "parso", "abhi", "hafte", "mahine", "week", "month",
    # category / object words
    "bijli", "chai", "pani", "bill", "rent", "kiraya", "saman", "maal",
    "stock", "dukaan", "petrol", "salary", "customer", "bank", "ghar",
    # money words
    "rupaye", "paisa", "paise", "udhar", "loan", "hisaab", "balance",
    "total", "overall", "bikri", "kharcha", "profit", "loss", "munafa",
    # question words
    "kitna", "kitni", "kitne", "kya", "kaun", "kis",
    # pronouns
    "maine", "mujhe", "humne", "hum", "main", "mera", "meri", "usko",
    "isko", "unko", "inko", "usse", "isse", "unse", "inse", "us", "is",
    "wo", "woh", "ye", "yeh", "sab", "sabka", "sabko", "kisi",
    # verb participles
    "diya", "diye", "liya", "liye", "becha", "kharida", "mila", "hua", "hui",
})

PARTY_PREPOSITIONS = ("se", "ko", "ka")


# =============================================================================
# QUERIES
# =============================================================================

BALANCE_PHRASES = ("ka balance", "ka kitna", "ka hisaab", "ki balance")

SALES_QUERY_WORDS = frozenset({
    "bikri", "sale", "sales", "becha", "aamdani", "income", "revenue", "kamai",
})
EXPENSE_QUERY_WORDS = frozenset({
    "kharcha", "kharch", "kharche", "expense", "expenses", "spent", "spend",
})
PROFIT_LOSS_WORDS = frozenset({
    "profit", "loss", "munafa", "fayda", "nuksaan", "ghaata", "earnings",
})
SUMMARY_WORDS = frozenset({"overall", "summary", "hisaab"})

TODAY_MARKERS = frozenset({"aaj", "today"})
YESTERDAY_MARKERS = frozenset({"kal", "yesterday"})
AFTER_MARKERS = frozenset({"baad", "after"})
WEEK_MARKERS = frozenset({"week", "hafte", "hafta", "saptah"})
MONTH_MARKERS = frozenset({"month", "mahine", "mahina"})
ALL_TIME_MARKERS = ("ab tak", "abhi tak", "so far", "overall", "total", "till now")


# =============================================================================
# NOTES
# =============================================================================

# Ordered: first matching subtype wins
EXPENSE_SUBTYPES = (
    (("bijli", "electricity"), "Electricity bill"),
    (("rent", "kiraya", "bhada"), "Rent"),
    (("chai", "tea", "nashta"), "Tea/Snacks"),
    (("petrol", "diesel", "fuel"), "Fuel"),
    (("salary", "wages", "tankhwah"), "Salary/Wages"),
    (("internet", "wifi", "broadband"), "Internet"),
    (("mobile", "phone", "recharge"), "Mobile"),
    (("water", "pani"), "Water"),
)
