from enum import Enum


class MemberRole(str, Enum):
    OWNER = "owner"
    MEMBER = "member"


class JoinRequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
