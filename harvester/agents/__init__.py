"""
Agent implementations for the BGG harvester.

Contains the stages a batch passes through:
- Batch Planner
- Ingestion Agent (BGG client)
- Game Normalization Agent
- Recommendation Scorer
"""
