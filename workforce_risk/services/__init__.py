"""
Services package for Workforce Risk.

Pure core:
- career_classifier: role classification, functional profile, career stage
- scoring: six sub-scores and the weighted overall score
- salary: salary band, per-level progression and AI pay pressure
- company_summary: demographics and flows summaries

Orchestration:
- hiring_signals: regional, employer and school hiring searches
- narrative / narrative_fallback: LLM narrative and deterministic fallbacks
- assessment: the /assess pipeline
- chat_tools / chat: the /chat tool loop
"""
