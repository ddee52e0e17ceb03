class ResolverError(Exception):
    """Base class for everything the resolver raises."""


class InvalidInput(ResolverError):
    """Arguments handed to the resolver are malformed."""


class EveryoneRoleMissing(InvalidInput):
    def __init__(self, guild_id: int) -> None:
        self.guild_id = guild_id
        super().__init__(f"the @everyone role is missing for guild {guild_id}")


class RoleNotFound(ResolverError):
    """A held role or a role overwrite points at a role the guild doesn't have."""

    def __init__(self, role_id: int, user_id: int | None = None) -> None:
        self.role_id = role_id
        self.user_id = user_id
        if user_id is None:
            message = f"role {role_id} is missing from guild roles"
        else:
            message = f"member {user_id} is missing role {role_id}"
        super().__init__(message)
