from .access import AccessDecisionReq, AccessDecisionRes, TokenReq, TokenRes
from .audit import AuditRecordRes, AuditRecordsRes
from .cards import (
    CardActionReq,
    CardActionRes,
    CardRes,
    IssueCardReq,
    ModifyPermissionsReq,
    PermissionReq,
)

__all__ = [
    "AccessDecisionReq",
    "AccessDecisionRes",
    "AuditRecordRes",
    "AuditRecordsRes",
    "CardActionReq",
    "CardActionRes",
    "CardRes",
    "IssueCardReq",
    "ModifyPermissionsReq",
    "PermissionReq",
    "TokenReq",
    "TokenRes",
]
