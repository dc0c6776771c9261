"""
Package core.vocabulary - Concurrent dictionary build.

Modules:
- membership: MembershipSet protocol + exact/Bloom strategies
- report: BuildReport, FileOutcome, BuildProgress
- pipeline: Walker -> readers -> line queue -> worker pool
- dictionary: Dictionary aggregate (state machine, dedup critical section)
"""

from core.vocabulary.membership import (
    MembershipSet,
    ExactMembershipSet,
    BloomMembershipSet,
    create_membership_set,
)
from core.vocabulary.report import (
    BuildProgress,
    BuildReport,
    FileOutcome,
    OutcomeStatus,
    WalkError,
)
from core.vocabulary.dictionary import (
    BuildState,
    Dictionary,
    DictionarySnapshot,
    DictionaryStateError,
)

__all__ = [
    "MembershipSet",
    "ExactMembershipSet",
    "BloomMembershipSet",
    "create_membership_set",
    "BuildProgress",
    "BuildReport",
    "FileOutcome",
    "OutcomeStatus",
    "WalkError",
    "BuildState",
    "Dictionary",
    "DictionarySnapshot",
    "DictionaryStateError",
]
