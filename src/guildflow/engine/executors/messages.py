# src/guildflow/engine/executors/messages.py
"""SendMessage executor.

Every target channel is resolved and every attachment is read before the
first message goes out, so a typo or a missing file never leaves a
half-sent announcement behind. Sends then run sequentially: channels in
list order, and within a channel the message blocks in list order.
"""

from __future__ import annotations

from guildflow.contracts.enums import NodeKind, ResourceKind
from guildflow.contracts.errors import ActionClientError, AttachmentReadError, NodeValidationError
from guildflow.contracts.node_data import MessageBlock, SendMessageData
from guildflow.contracts.records import OutgoingFile
from guildflow.contracts.resources import TemplateResources
from guildflow.contracts.results import NodeExecutionResult
from guildflow.engine.dynamic_values import first_by_name
from guildflow.engine.executors.base import ItemBatch, non_blank, resolve_names
from guildflow.engine.executors.types import ExecutionContext


def _read_files(node_id: str, block: MessageBlock, ctx: ExecutionContext) -> tuple[OutgoingFile, ...]:
    if not block.attachments:
        return ()
    if ctx.attachments is None:
        raise AttachmentReadError(node_id, block.attachments[0].file_name, "no attachment store configured")
    files: list[OutgoingFile] = []
    for attachment in block.attachments:
        try:
            content = ctx.attachments.read(attachment.file_path)
        except (OSError, ValueError) as exc:
            raise AttachmentReadError(node_id, attachment.file_name, str(exc)) from exc
        files.append(OutgoingFile(file_name=attachment.file_name, content=content))
    return tuple(files)


async def send_messages(
    node_id: str, data: SendMessageData, ctx: ExecutionContext, catalog: TemplateResources
) -> NodeExecutionResult:
    """Send every non-empty message block to every listed channel."""
    channel_names = list(dict.fromkeys(non_blank(data.channel_names)))
    if not channel_names:
        raise NodeValidationError(node_id, "At least one channel name is required")
    blocks = [block for block in data.messages if not block.is_empty]
    if not blocks:
        raise NodeValidationError(node_id, "Every message is empty; add content or an attachment")

    channel_index = first_by_name((c.name, c.id) for c in ctx.resources.list_channels(ctx.session.session_id))
    channel_ids = resolve_names(node_id, ResourceKind.CHANNEL, channel_names, channel_index, catalog)
    outgoing = [(block, _read_files(node_id, block, ctx)) for block in blocks]

    batch = ItemBatch(node_id, NodeKind.SEND_MESSAGE, ctx, total=len(channel_ids) * len(outgoing))
    for channel_name, channel_id in zip(channel_names, channel_ids, strict=True):
        for position, (block, files) in enumerate(outgoing, start=1):
            item = f"{channel_name}#{position}"
            batch.start(item)
            try:
                message_id = await ctx.client.send_message(channel_id, block.content, files)
            except ActionClientError as exc:
                batch.failed(item, exc)
                continue
            batch.succeeded(item, message_id)
    return batch.result(data)
