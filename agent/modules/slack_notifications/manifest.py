"""Slack notifications module manifest — tool definitions."""

from shared.schemas.tools import ModuleManifest, ToolDefinition, ToolParameter

MANIFEST = ModuleManifest(
    module_name="slack_notifications",
    description="Send notifications to Slack users and channels, and check that a Slack destination exists.",
    tools=[
        ToolDefinition(
            name="slack_notifications.notify",
            description=(
                "Send a message to a Slack user (DM) or channel. "
                "Markdown and HTML bodies are converted to Slack formatting. "
                "Returns the Slack message id, which can be passed back as thread_id to reply in a thread."
            ),
            parameters=[
                ToolParameter(
                    name="message",
                    type="string",
                    description="Message body",
                ),
                ToolParameter(
                    name="channel_type",
                    type="string",
                    description="'dm' to message a user, 'channel' to post to a channel",
                    enum=["dm", "channel"],
                ),
                ToolParameter(
                    name="recipient_id",
                    type="string",
                    description="Slack user id (required when channel_type is 'dm')",
                    required=False,
                ),
                ToolParameter(
                    name="channel_id",
                    type="string",
                    description="Slack channel id (required when channel_type is 'channel')",
                    required=False,
                ),
                ToolParameter(
                    name="format",
                    type="string",
                    description="Body format. Default: mrkdwn",
                    required=False,
                    enum=["mrkdwn", "plain", "markdown", "html"],
                ),
                ToolParameter(
                    name="thread_id",
                    type="string",
                    description="Message id to reply to in a thread",
                    required=False,
                ),
                ToolParameter(
                    name="attachments",
                    type="array",
                    description="Slack legacy attachment objects",
                    required=False,
                ),
            ],
            required_permission="user",
        ),
        ToolDefinition(
            name="slack_notifications.validate",
            description=(
                "Check that a Slack user or channel exists and is reachable by the bot. "
                "Returns valid=false with a reason instead of failing."
            ),
            parameters=[
                ToolParameter(
                    name="channel_type",
                    type="string",
                    description="'dm' or 'channel'",
                    enum=["dm", "channel"],
                ),
                ToolParameter(
                    name="recipient_id",
                    type="string",
                    description="Slack user id (required when channel_type is 'dm')",
                    required=False,
                ),
                ToolParameter(
                    name="channel_id",
                    type="string",
                    description="Slack channel id (required when channel_type is 'channel')",
                    required=False,
                ),
            ],
            required_permission="guest",
        ),
    ],
)
