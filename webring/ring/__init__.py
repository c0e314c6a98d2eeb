"""Ring subsystem — member models, ordering, shared store."""

from .models import HealthStatus, Member, MemberHealth
from .registry import MemberConfigError, load_members
from .store import MemberNotFoundError, NoHealthyMembersError, RingStore
