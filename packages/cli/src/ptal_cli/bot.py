"""Discord front end: the /ptal slash command and the Refresh button.

The message posted for a PTAL request is the request's only storage. It is
built from a RenderedNotification and read back into one on refresh, so the
conversions here must not drop or reshape anything ``ptal_core.presentation``
relies on.
"""

from __future__ import annotations

import asyncio
import logging

import discord
from discord import app_commands

from ptal_core.errors import DecodeError, PTALError
from ptal_core.gh.pull_request import PullRequestSource
from ptal_core.models import Button, Field, Identity, RenderedNotification
from ptal_core.notifier import build_context, compose, refresh
from ptal_core.presentation import REFRESH_CUSTOM_ID, REFRESH_LABEL
from ptal_core.reconcile import BotFilter, is_bot_account

logger = logging.getLogger(__name__)


def identity_of(user) -> Identity:
    return Identity(display_name=user.display_name, avatar_url=str(user.display_avatar.url))


def to_embed(notification: RenderedNotification) -> discord.Embed:
    embed = discord.Embed(
        title=notification.title,
        url=notification.url,
        color=notification.color,
        timestamp=notification.timestamp,
    )
    if notification.author_name is not None:
        embed.set_author(name=notification.author_name, icon_url=notification.author_icon_url or None)
    for f in notification.fields:
        embed.add_field(name=f.name, value=f.value, inline=f.inline)
    if notification.footer:
        embed.set_footer(text=notification.footer)
    return embed


def _buttons_from_components(components) -> list[Button]:
    buttons = []
    for row in components or []:
        for child in getattr(row, "children", []):
            emoji = getattr(child, "emoji", None)
            buttons.append(
                Button(
                    label=getattr(child, "label", None) or "",
                    emoji=str(emoji) if emoji else "",
                    url=getattr(child, "url", None),
                    custom_id=getattr(child, "custom_id", None),
                )
            )
    return buttons


def notification_from_message(message) -> RenderedNotification:
    """Read a posted PTAL message back into a RenderedNotification."""
    if not message.embeds:
        raise DecodeError(f"Message {message.id} has no embed")
    embed = message.embeds[0]
    return RenderedNotification(
        content=message.content or "",
        title=embed.title or "",
        url=embed.url or "",
        color=embed.color.value if embed.color is not None else 0,
        author_name=embed.author.name,
        author_icon_url=embed.author.icon_url or "",
        fields=[Field(f.name, f.value, bool(f.inline)) for f in embed.fields],
        footer=embed.footer.text or "",
        timestamp=embed.timestamp,
        buttons=_buttons_from_components(message.components),
    )


class NotificationView(discord.ui.View):
    """Buttons for a PTAL message. Never times out so Refresh keeps working."""

    def __init__(self, buttons: list[Button], on_refresh):
        super().__init__(timeout=None)
        for b in buttons:
            if b.url:
                item = discord.ui.Button(label=b.label, emoji=b.emoji or None, url=b.url)
            else:
                item = discord.ui.Button(
                    label=b.label,
                    emoji=b.emoji or None,
                    style=discord.ButtonStyle.primary,
                    custom_id=b.custom_id,
                )
                item.callback = on_refresh
            self.add_item(item)


class PTALHandlers:
    """Interaction handlers. Each call runs the whole pipeline once."""

    def __init__(self, source: PullRequestSource, is_bot: BotFilter = is_bot_account):
        self.source = source
        self.is_bot = is_bot

    def view_for(self, notification: RenderedNotification) -> NotificationView:
        """Buttons to attach to a posted message.

        The view is stopped before it is sent so discord.py does not keep one
        per message; Refresh presses are routed by :meth:`persistent_view`.
        """
        view = NotificationView(notification.buttons, self.on_refresh)
        view.stop()
        return view

    def persistent_view(self) -> NotificationView:
        """Routes Refresh presses on messages posted before the last restart."""
        return NotificationView([Button(label=REFRESH_LABEL, emoji="🔁", custom_id=REFRESH_CUSTOM_ID)], self.on_refresh)

    async def on_request(
        self,
        interaction: discord.Interaction,
        reference_text: str,
        description: str = "",
        deployment_url: str = "",
    ) -> None:
        try:
            context = build_context(reference_text, description, deployment_url, identity_of(interaction.user))
        except PTALError as e:
            logger.info("Rejected PTAL request %r: %s", reference_text, e)
            await interaction.response.send_message(e.user_message, ephemeral=True)
            return

        await interaction.response.defer(thinking=True)
        try:
            notification = await asyncio.to_thread(compose, context, self.source, self.is_bot)
        except PTALError as e:
            logger.warning("PTAL request for %s failed: %s", context.reference.slug, e)
            await interaction.delete_original_response()
            await interaction.followup.send(e.user_message, ephemeral=True)
            return

        await interaction.followup.send(
            content=notification.content,
            embed=to_embed(notification),
            view=self.view_for(notification),
        )

    async def on_refresh(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer()
        try:
            current = notification_from_message(interaction.message)
            updated = await asyncio.to_thread(refresh, current, identity_of(interaction.user), self.source, self.is_bot)
        except PTALError as e:
            logger.warning("Refresh of message %s failed: %s", interaction.message.id, e)
            await interaction.followup.send(e.user_message, ephemeral=True)
            return

        await interaction.edit_original_response(
            content=updated.content,
            embed=to_embed(updated),
            view=self.view_for(updated),
        )


def build_command(name: str, handlers: PTALHandlers) -> app_commands.Command:
    @app_commands.describe(
        github="The pull request: a GitHub URL or owner/repo#number",
        description="What reviewers should look at",
        deployment="Link to a deployment of this change",
    )
    async def ptal(interaction: discord.Interaction, github: str, description: str = "", deployment: str = ""):
        await handlers.on_request(interaction, github, description, deployment)

    return app_commands.Command(
        name=name,
        description="Ask the team to take a look at a pull request",
        callback=ptal,
    )


class PTALClient(discord.Client):
    def __init__(self, config: dict, handlers: PTALHandlers):
        super().__init__(intents=discord.Intents.none())
        self.config = config
        self.handlers = handlers
        self.tree = app_commands.CommandTree(self)

    async def setup_hook(self) -> None:
        self.add_view(self.handlers.persistent_view())
        self.tree.add_command(build_command(self.config["command_name"], self.handlers))

        guild_id = self.config.get("guild_id")
        if guild_id:
            guild = discord.Object(id=int(guild_id))
            self.tree.copy_global_to(guild=guild)
            await self.tree.sync(guild=guild)
            logger.info("Slash commands synced to guild %s", guild_id)
        else:
            await self.tree.sync()
            logger.info("Slash commands synced globally")

    async def on_ready(self) -> None:
        logger.info("Logged in as %s", self.user)
