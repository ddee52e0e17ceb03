"""
Permission flag groups and the per-channel-type policy tables.

Which flags mean something in which kind of channel, and which flags stop
meaning anything once another flag is gone, is policy and lives here as
data. The resolver only walks these tables.
"""

from __future__ import annotations

import typing
from types import MappingProxyType

import attr
import hikari

from .errors import InvalidInput

ALL_PERMISSIONS = hikari.Permissions.all_permissions()

PERMISSIONS_CHANNEL = (
    hikari.Permissions.CREATE_INSTANT_INVITE
    | hikari.Permissions.MANAGE_CHANNELS
    | hikari.Permissions.MANAGE_ROLES
    | hikari.Permissions.MANAGE_WEBHOOKS
    | hikari.Permissions.VIEW_CHANNEL
)

PERMISSIONS_TEXT = (
    hikari.Permissions.ADD_REACTIONS
    | hikari.Permissions.SEND_MESSAGES
    | hikari.Permissions.SEND_TTS_MESSAGES
    | hikari.Permissions.MANAGE_MESSAGES
    | hikari.Permissions.EMBED_LINKS
    | hikari.Permissions.ATTACH_FILES
    | hikari.Permissions.READ_MESSAGE_HISTORY
    | hikari.Permissions.MENTION_ROLES
    | hikari.Permissions.USE_EXTERNAL_EMOJIS
    | hikari.Permissions.USE_EXTERNAL_STICKERS
    | hikari.Permissions.USE_APPLICATION_COMMANDS
    | hikari.Permissions.MANAGE_THREADS
    | hikari.Permissions.CREATE_PUBLIC_THREADS
    | hikari.Permissions.CREATE_PRIVATE_THREADS
    | hikari.Permissions.SEND_MESSAGES_IN_THREADS
)

PERMISSIONS_VOICE = (
    hikari.Permissions.CONNECT
    | hikari.Permissions.SPEAK
    | hikari.Permissions.MUTE_MEMBERS
    | hikari.Permissions.DEAFEN_MEMBERS
    | hikari.Permissions.MOVE_MEMBERS
    | hikari.Permissions.USE_VOICE_ACTIVITY
    | hikari.Permissions.PRIORITY_SPEAKER
    | hikari.Permissions.STREAM
    | hikari.Permissions.MANAGE_EVENTS
)

# cleared whenever SEND_MESSAGES is missing
PERMISSIONS_MESSAGING = (
    hikari.Permissions.ATTACH_FILES
    | hikari.Permissions.EMBED_LINKS
    | hikari.Permissions.MENTION_ROLES
    | hikari.Permissions.SEND_TTS_MESSAGES
)

CONTEXT_MASKS: dict[hikari.ChannelType, hikari.Permissions] = {
    hikari.ChannelType.GUILD_TEXT: PERMISSIONS_CHANNEL | PERMISSIONS_TEXT,
    hikari.ChannelType.GUILD_NEWS: PERMISSIONS_CHANNEL | PERMISSIONS_TEXT,
    hikari.ChannelType.GUILD_FORUM: PERMISSIONS_CHANNEL | PERMISSIONS_TEXT,
    hikari.ChannelType.GUILD_MEDIA: PERMISSIONS_CHANNEL | PERMISSIONS_TEXT,
    hikari.ChannelType.GUILD_NEWS_THREAD: PERMISSIONS_CHANNEL | PERMISSIONS_TEXT,
    hikari.ChannelType.GUILD_PUBLIC_THREAD: PERMISSIONS_CHANNEL | PERMISSIONS_TEXT,
    hikari.ChannelType.GUILD_PRIVATE_THREAD: PERMISSIONS_CHANNEL | PERMISSIONS_TEXT,
    hikari.ChannelType.GUILD_VOICE: PERMISSIONS_CHANNEL | PERMISSIONS_VOICE,
    hikari.ChannelType.GUILD_STAGE: (
        PERMISSIONS_CHANNEL
        | PERMISSIONS_VOICE
        | hikari.Permissions.REQUEST_TO_SPEAK
    ),
    hikari.ChannelType.GUILD_CATEGORY: PERMISSIONS_CHANNEL,
}

IMPLICIT_DENIALS: tuple[tuple[hikari.Permissions, hikari.Permissions], ...] = (
    (hikari.Permissions.VIEW_CHANNEL, ALL_PERMISSIONS),
    (hikari.Permissions.SEND_MESSAGES, PERMISSIONS_MESSAGING),
)

# threads gate messaging on SEND_MESSAGES_IN_THREADS instead
THREAD_IMPLICIT_DENIALS: tuple[tuple[hikari.Permissions, hikari.Permissions], ...] = (
    (hikari.Permissions.VIEW_CHANNEL, ALL_PERMISSIONS),
    (hikari.Permissions.SEND_MESSAGES_IN_THREADS, PERMISSIONS_MESSAGING),
)

CONTEXT_IMPLICIT_DENIALS: dict[
    hikari.ChannelType, tuple[tuple[hikari.Permissions, hikari.Permissions], ...]
] = {
    hikari.ChannelType.GUILD_NEWS_THREAD: THREAD_IMPLICIT_DENIALS,
    hikari.ChannelType.GUILD_PUBLIC_THREAD: THREAD_IMPLICIT_DENIALS,
    hikari.ChannelType.GUILD_PRIVATE_THREAD: THREAD_IMPLICIT_DENIALS,
}


def normalize(value: int) -> hikari.Permissions:
    """Convert ``value`` to permissions with every unknown bit cleared."""
    return hikari.Permissions(int(value)) & ALL_PERMISSIONS


def _freeze_masks(
    masks: typing.Mapping[hikari.ChannelType, int]
) -> typing.Mapping[int, hikari.Permissions]:
    return MappingProxyType(
        {int(key): normalize(value) for key, value in masks.items()}
    )


def _freeze_denials(
    denials: typing.Iterable[tuple[int, int]]
) -> tuple[tuple[hikari.Permissions, hikari.Permissions], ...]:
    return tuple((normalize(gate), normalize(cleared)) for gate, cleared in denials)


def _freeze_context_denials(
    denials: typing.Mapping[hikari.ChannelType, typing.Iterable[tuple[int, int]]]
) -> typing.Mapping[int, tuple[tuple[hikari.Permissions, hikari.Permissions], ...]]:
    return MappingProxyType(
        {int(key): _freeze_denials(value) for key, value in denials.items()}
    )


@attr.define(frozen=True)
class ContextPolicy:
    masks: typing.Mapping[int, hikari.Permissions] = attr.field(
        factory=lambda: dict(CONTEXT_MASKS), converter=_freeze_masks
    )
    # applied in order; (gate, cleared when gate is absent)
    implicit_denials: tuple[tuple[hikari.Permissions, hikari.Permissions], ...] = (
        attr.field(default=IMPLICIT_DENIALS, converter=_freeze_denials)
    )
    # per channel type replacements for implicit_denials
    context_denials: typing.Mapping[
        int, tuple[tuple[hikari.Permissions, hikari.Permissions], ...]
    ] = attr.field(
        factory=lambda: dict(CONTEXT_IMPLICIT_DENIALS), converter=_freeze_context_denials
    )

    def mask_for(self, channel_type: hikari.ChannelType | int) -> hikari.Permissions:
        mask = self.masks.get(int(channel_type))
        if mask is None:
            raise InvalidInput(f"channel type {channel_type!r} is not a guild context")
        return mask

    def denials_for(
        self, channel_type: hikari.ChannelType | int | None
    ) -> tuple[tuple[hikari.Permissions, hikari.Permissions], ...]:
        if channel_type is None:
            return self.implicit_denials
        return self.context_denials.get(int(channel_type), self.implicit_denials)


DEFAULT_POLICY = ContextPolicy()


def mask_for_context(
    permissions: hikari.Permissions,
    channel_type: hikari.ChannelType | int,
    policy: ContextPolicy = DEFAULT_POLICY,
) -> hikari.Permissions:
    return normalize(permissions) & policy.mask_for(channel_type)


def apply_implicit_denials(
    permissions: hikari.Permissions,
    policy: ContextPolicy = DEFAULT_POLICY,
    channel_type: hikari.ChannelType | int | None = None,
) -> hikari.Permissions:
    for gate, cleared in policy.denials_for(channel_type):
        if not permissions & gate:
            permissions &= ~cleared
    return permissions
