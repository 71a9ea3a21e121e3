"""Concept map generator: text -> concepts -> validated Mermaid flowchart."""
