from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Officer roles as resolved by the identity directory."""

    JE = "JE"
    FE = "FE"
    SDO = "SDO"
    EE = "EE"
    SE = "SE"
    CE = "CE"
    ADMIN = "ADMIN"
    PS = "PS"


FIELD_ROLES = frozenset({Role.JE, Role.FE})
VERIFIER_ROLES = frozenset({Role.SDO})
STAGE_ADMIN_ROLES = frozenset({Role.EE, Role.ADMIN})
PAYMENT_ROLES = frozenset({Role.EE, Role.ADMIN})
VISIT_ROLES = frozenset(Role)


class VisitType(str, Enum):
    SITE = "site"
    OFFICE = "office"


class GeoMethod(str, Enum):
    POINT_RADIUS = "POINT_RADIUS"
    ROUTE_CORRIDOR = "ROUTE_CORRIDOR"
    NONE = "NONE"


class ProjectType(str, Enum):
    POINT = "POINT"
    LINEAR = "LINEAR"


class VerificationSource(str, Enum):
    """Where the supervisory confirmation of a stage happened."""

    SITE = "site"
    OFFICE = "office"
    UNKNOWN = "unknown"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Discipline(str, Enum):
    CIVIL = "civil"
    ELECTRICAL = "electrical"
    MECHANICAL = "mechanical"
    MIXED = "mixed"
    UNKNOWN = "unknown"


class FakePhoto(str, Enum):
    YES = "yes"
    NO = "no"
    SUSPECTED = "suspected"


class Realism(str, Enum):
    REALISTIC = "realistic"
    IMPOSSIBLE = "impossible"
    DOUBTFUL = "doubtful"
