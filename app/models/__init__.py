from app.models.membership import Member
from app.models.organization import Invitation, Organization
from app.models.project import Project
from app.models.task import Task
from app.models.user import User

__all__ = ["User", "Organization", "Invitation", "Project", "Member", "Task"]
