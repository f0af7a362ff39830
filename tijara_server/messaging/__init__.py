"""Buyer/seller messaging about listings.

This module provides:
- Conversation and Message models
- MessagingService: send, list conversations, read pages, delete
"""

from tijara_server.messaging.models import Conversation, Message, conversation_pair_key
from tijara_server.messaging.service import MessagingService

__all__ = ['Conversation', 'Message', 'conversation_pair_key', 'MessagingService']
