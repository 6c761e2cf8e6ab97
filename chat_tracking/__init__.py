"""
Chat session tracking and analytics service.

Records chat sessions and messages for a RAG chatbot, forwards interaction
metrics to Langfuse, and exposes aggregate analytics.
"""
