from enum import Enum


class SupplementType(str, Enum):
    PCT = "pct"
    FIX = "fix"

    def __str__(self):
        return self.value


class MandatStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    def __str__(self):
        return self.value


class QuoteSource(str, Enum):
    API = "api"
    MANDAT = "mandat"
    REQUOTE = "requote"

    def __str__(self):
        return self.value


class AuditAction(str, Enum):
    CREATE_PRICING_SET = "create_pricing_set"
    DELETE_PRICING_SET = "delete_pricing_set"
    ACTIVATE_PRICING_SET = "activate_pricing_set"
    CREATE_MANDAT = "create_mandat"
    REQUOTE_MANDAT = "requote_mandat"

    def __str__(self):
        return self.value
