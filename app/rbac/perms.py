from enum import Enum

class Standing(str, Enum):
    """Facts about an actor relative to an organization/project chain."""

    org_owner = "org_owner"
    project_creator = "project_creator"
    project_member = "project_member"  # active member of that exact project
    org_member = "org_member"  # active member anywhere in the org
    signed_in = "signed_in"

S = Standing

# any one standing grants the action; checked in order, cheapest first.
# task status changes are gated on assignment instead (services.tasks).
# actions missing from this table are forbidden.
PERMS: dict[str, tuple[Standing, ...]] = {
    "org:rename": (S.org_owner,),

    "projects:create": (S.org_owner,),
    "projects:read": (S.org_owner, S.org_member),
    "projects:update": (S.org_owner, S.project_creator),
    "projects:delete": (S.org_owner, S.project_creator),

    "members:add": (S.org_owner, S.project_creator),
    "members:read": (S.org_owner, S.project_creator, S.project_member),
    "members:read_org": (S.org_owner, S.org_member),
    "members:update": (S.org_owner, S.project_creator),
    "members:delete": (S.org_owner, S.project_creator),

    "tasks:create": (S.org_owner, S.project_creator),
    "tasks:read": (S.signed_in,),
    "tasks:delete": (S.signed_in,),
    "tasks:delete_strict": (S.org_owner, S.project_creator),
}
