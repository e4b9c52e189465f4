"""
Hisaab - Voice Bookkeeping Classifier

Turns informal Hinglish shopkeeper speech ("Ramesh se 500 liye udhar")
into strictly-typed bookkeeping records: a Transaction (money moved)
or a Query (a question about existing records).

DESIGN PRINCIPLES:
1. The core classifier is deterministic, pure and rule-based
2. Ambiguity resolves to a documented, conservative default
3. Every classification carries a confidence and the rule that decided it
4. Model-backed classification is optional and always falls back to rules
5. Storage and query execution are swappable collaborators
"""

__version__ = "1.0.0"
__author__ = "Hisaab Team"
