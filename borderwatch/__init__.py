"""
BorderWatch - airport incident intake and alerts assistant.

Scenario reports come in with a photo, are recorded per scenario, summarized as
KPIs, and can be queried in plain language through an OpenAI-backed chat.
"""
