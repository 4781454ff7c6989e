from enum import Enum

class Role(str, Enum):
    owner = "owner"
    member = "member"
    viewer = "viewer"

# owner > member > viewer when a user holds several roles in one org
ROLE_RANK: dict[Role, int] = {
    Role.owner: 3,
    Role.member: 2,
    Role.viewer: 1,
}

class ProjectStatus(str, Enum):
    active = "active"
    completed = "completed"
    on_hold = "on-hold"
    cancelled = "cancelled"

class TaskStatus(str, Enum):
    todo = "todo"
    in_progress = "in-progress"
    done = "done"

def enum_values(enum_cls: type[Enum]) -> list[str]:
    # persist values ("in-progress"), not member names
    return [m.value for m in enum_cls]
