"""
Models package exports.
"""
from models.api_models import (
    Credentials,
    ProjectCreate,
    TodoCreate,
    MaterialCreate,
    PostCreate,
    ProjectContext,
    StructuredReply,
    ChatRequest,
)
from models.chat_models import (
    TurnRole,
    TextContent,
    StructuredContent,
    ConversationTurn,
    AssistantStage,
    AssistantContext,
)

__all__ = [
    'Credentials',
    'ProjectCreate',
    'TodoCreate',
    'MaterialCreate',
    'PostCreate',
    'ProjectContext',
    'StructuredReply',
    'ChatRequest',
    'TurnRole',
    'TextContent',
    'StructuredContent',
    'ConversationTurn',
    'AssistantStage',
    'AssistantContext',
]
