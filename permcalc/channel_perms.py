"""Shortcuts for resolving permissions straight from hikari's cached objects."""

from __future__ import annotations

import hikari

from .flags import DEFAULT_POLICY, ContextPolicy
from .resolver import PermissionResolver


def resolver_for(
    guild: hikari.Guild,
    *,
    continue_on_missing_items: bool = False,
    policy: ContextPolicy = DEFAULT_POLICY,
) -> PermissionResolver:
    roles = {role_id: role.permissions for role_id, role in guild.get_roles().items()}
    return PermissionResolver(
        guild.id,
        guild.owner_id,
        roles,
        continue_on_missing_items=continue_on_missing_items,
        policy=policy,
    )


def guild_permissions_for(
    member: hikari.Member, guild: hikari.Guild
) -> hikari.Permissions:
    return resolver_for(guild).member_permissions(member.id, member.role_ids)


def permissions_for(
    member: hikari.Member, channel: hikari.GuildChannel, guild: hikari.Guild
) -> hikari.Permissions:
    return resolver_for(guild).in_context(
        member.id, member.role_ids, channel.type, channel.permission_overwrites
    )


def permissions_for_role(
    role: hikari.Role, guild: hikari.Guild, channel: hikari.GuildChannel
) -> hikari.Permissions:
    return resolver_for(guild).role_in_context(
        role.id, channel.type, channel.permission_overwrites
    )
