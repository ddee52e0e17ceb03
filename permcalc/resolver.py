"""
Permission resolver.

Calculates what a member may do in a guild, either at the guild level or
inside a single channel, from role grants and channel overwrites that were
fetched elsewhere. Nothing here does I/O or keeps state between calls.

Precedence, lowest to highest:

    @everyone grant -> held role grants -> @everyone overwrite
    -> held role overwrites -> member overwrite
    -> channel type mask -> implicit denials

The guild owner and anyone holding ADMINISTRATOR skip all of it.
"""

from __future__ import annotations

import logging
import typing
from types import MappingProxyType

import hikari

from .errors import EveryoneRoleMissing, InvalidInput, RoleNotFound
from .flags import (
    ALL_PERMISSIONS,
    DEFAULT_POLICY,
    ContextPolicy,
    apply_implicit_denials,
    normalize,
)

if typing.TYPE_CHECKING:
    from .config import Settings

logger = logging.getLogger(__name__)

OverwritesType = typing.Union[
    typing.Iterable[hikari.PermissionOverwrite],
    typing.Mapping[int, hikari.PermissionOverwrite],
]


def _check_id(name: str, value: int) -> hikari.Snowflake:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidInput(f"{name} must be a non-negative integer, got {value!r}")
    return hikari.Snowflake(value)


def _iter_overwrites(
    overwrites: OverwritesType,
) -> typing.Iterator[hikari.PermissionOverwrite]:
    if isinstance(overwrites, typing.Mapping):
        return iter(overwrites.values())
    return iter(overwrites)


def _apply(
    permissions: hikari.Permissions, allow: hikari.Permissions, deny: hikari.Permissions
) -> hikari.Permissions:
    permissions &= ~deny
    permissions |= allow
    return permissions


class PermissionResolver:
    """Resolves permissions for members of one guild.

    ``roles`` maps every role id of the guild to the permissions it grants
    and must contain the @everyone role (the role whose id is the guild id).

    With ``continue_on_missing_items`` enabled, roles missing from ``roles``
    are skipped instead of raising. The results may then be incomplete.
    """

    guild_id: hikari.Snowflake
    owner_id: hikari.Snowflake
    roles: typing.Mapping[hikari.Snowflake, hikari.Permissions]
    continue_on_missing_items: bool
    policy: ContextPolicy

    def __init__(
        self,
        guild_id: int,
        owner_id: int,
        roles: typing.Mapping[int, int],
        *,
        continue_on_missing_items: bool = False,
        policy: ContextPolicy = DEFAULT_POLICY,
    ) -> None:
        self.guild_id = _check_id("guild_id", guild_id)
        self.owner_id = _check_id("owner_id", owner_id)
        self.roles = MappingProxyType(
            {_check_id("role id", k): normalize(v) for k, v in roles.items()}
        )
        self.continue_on_missing_items = continue_on_missing_items
        self.policy = policy

        if self.guild_id not in self.roles:
            if not continue_on_missing_items:
                raise EveryoneRoleMissing(self.guild_id)
            logger.debug(f"everyone role not in guild {self.guild_id}")

    @classmethod
    def from_settings(
        cls,
        guild_id: int,
        owner_id: int,
        roles: typing.Mapping[int, int],
        settings: Settings,
        policy: ContextPolicy = DEFAULT_POLICY,
    ) -> PermissionResolver:
        return cls(
            guild_id,
            owner_id,
            roles,
            continue_on_missing_items=settings.continue_on_missing_items,
            policy=policy,
        )

    def __repr__(self) -> str:
        return (
            f"PermissionResolver(guild_id={self.guild_id}, owner_id={self.owner_id}, "
            f"roles={len(self.roles)})"
        )

    def _everyone(self) -> hikari.Permissions:
        permissions = self.roles.get(self.guild_id)
        if permissions is None:
            if not self.continue_on_missing_items:
                raise RoleNotFound(self.guild_id)
            return hikari.Permissions.NONE
        return permissions

    def _held_roles(
        self, user_id: int, role_ids: typing.Iterable[int]
    ) -> dict[hikari.Snowflake, hikari.Permissions]:
        held: dict[hikari.Snowflake, hikari.Permissions] = {}
        for role_id in role_ids:
            role_id = _check_id("role id", role_id)
            if role_id in held:
                continue
            permissions = self.roles.get(role_id)
            if permissions is None:
                if not self.continue_on_missing_items:
                    raise RoleNotFound(role_id, user_id)
                logger.debug(f"user {user_id} has role {role_id} but it was not provided")
                permissions = hikari.Permissions.NONE
            held[role_id] = permissions
        return held

    def _root(
        self, held: typing.Mapping[hikari.Snowflake, hikari.Permissions]
    ) -> hikari.Permissions:
        permissions = self._everyone()
        for role_permissions in held.values():
            permissions |= role_permissions

        if permissions & hikari.Permissions.ADMINISTRATOR:
            return ALL_PERMISSIONS

        return permissions

    def member_permissions(
        self, user_id: int, role_ids: typing.Iterable[int]
    ) -> hikari.Permissions:
        """Guild-level permissions of a member.

        Raises :class:`RoleNotFound` when one of ``role_ids`` is not a role of
        the guild, unless missing items are skipped.
        """
        user_id = _check_id("user_id", user_id)
        if user_id == self.owner_id:
            return ALL_PERMISSIONS
        return self._root(self._held_roles(user_id, role_ids))

    def in_context(
        self,
        user_id: int,
        role_ids: typing.Iterable[int],
        channel_type: hikari.ChannelType | int,
        overwrites: OverwritesType,
        *,
        root: hikari.Permissions | None = None,
    ) -> hikari.Permissions:
        """Permissions of a member inside a channel.

        ``root`` may be the result of an earlier :meth:`member_permissions`
        call for the same member to avoid recomputing it.

        Guild-only permissions (banning, managing the guild, ...) are never
        part of the result, except for the owner and administrators who get
        everything.
        """
        user_id = _check_id("user_id", user_id)
        if user_id == self.owner_id:
            return ALL_PERMISSIONS

        held = self._held_roles(user_id, role_ids)
        permissions = self._root(held) if root is None else normalize(root)
        if permissions & hikari.Permissions.ADMINISTRATOR:
            return ALL_PERMISSIONS

        mask = self.policy.mask_for(channel_type)
        overwrites = list(_iter_overwrites(overwrites))
        self._check_overwrite_targets(overwrites)

        roles_allow = roles_deny = hikari.Permissions.NONE
        member_allow = member_deny = hikari.Permissions.NONE
        for overwrite in overwrites:
            if overwrite.type == hikari.PermissionOverwriteType.ROLE:
                # @everyone goes first, straight onto the base permissions
                if overwrite.id == self.guild_id:
                    permissions = _apply(permissions, overwrite.allow, overwrite.deny)
                elif overwrite.id in held:
                    roles_allow |= overwrite.allow
                    roles_deny |= overwrite.deny
            elif overwrite.type == hikari.PermissionOverwriteType.MEMBER:
                if overwrite.id == user_id:
                    member_allow |= overwrite.allow
                    member_deny |= overwrite.deny
            else:
                raise InvalidInput(f"unknown overwrite type {overwrite.type!r}")

        permissions = _apply(permissions, roles_allow, roles_deny)
        permissions = _apply(permissions, member_allow, member_deny)

        permissions = normalize(permissions) & mask
        return apply_implicit_denials(permissions, self.policy, channel_type)

    def role_permissions(self, role_id: int) -> hikari.Permissions:
        """Guild-level permissions of someone holding only this role."""
        role_id = _check_id("role_id", role_id)
        permissions = self.roles.get(role_id)
        if permissions is None:
            if not self.continue_on_missing_items:
                raise RoleNotFound(role_id)
            logger.debug(f"role {role_id} not in guild {self.guild_id}")
            permissions = hikari.Permissions.NONE

        permissions |= self._everyone()
        if permissions & hikari.Permissions.ADMINISTRATOR:
            return ALL_PERMISSIONS
        return permissions

    def role_in_context(
        self,
        role_id: int,
        channel_type: hikari.ChannelType | int,
        overwrites: OverwritesType,
    ) -> hikari.Permissions:
        """Permissions of someone holding only this role inside a channel."""
        role_id = _check_id("role_id", role_id)
        permissions = self.role_permissions(role_id)
        if permissions & hikari.Permissions.ADMINISTRATOR:
            return ALL_PERMISSIONS

        mask = self.policy.mask_for(channel_type)
        overwrites = list(_iter_overwrites(overwrites))
        self._check_overwrite_targets(overwrites)

        role_overwrites = [
            overwrite
            for overwrite in overwrites
            if overwrite.type == hikari.PermissionOverwriteType.ROLE
        ]
        for overwrite in role_overwrites:
            if overwrite.id == self.guild_id:
                permissions = _apply(permissions, overwrite.allow, overwrite.deny)
        for overwrite in role_overwrites:
            if overwrite.id == role_id and role_id != self.guild_id:
                permissions = _apply(permissions, overwrite.allow, overwrite.deny)

        permissions = normalize(permissions) & mask
        return apply_implicit_denials(permissions, self.policy, channel_type)

    def _check_overwrite_targets(
        self, overwrites: typing.Iterable[hikari.PermissionOverwrite]
    ) -> None:
        for overwrite in overwrites:
            if overwrite.type != hikari.PermissionOverwriteType.ROLE:
                continue
            if overwrite.id in self.roles:
                continue
            if not self.continue_on_missing_items:
                raise RoleNotFound(overwrite.id)
            logger.debug(f"overwrite for role {overwrite.id} which is not in guild")
