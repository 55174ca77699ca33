from .database import db
from .user import User
from .team import Team, TeamMember
from .invitation import TeamInvitation
from .agency import Agency, AgencyMember, AgencyInvitation

__all__ = ['db', 'User', 'Team', 'TeamMember', 'TeamInvitation', 'Agency', 'AgencyMember', 'AgencyInvitation']
