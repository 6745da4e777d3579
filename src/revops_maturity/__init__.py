"""RevOps Maturity Assessment service.

Lead-generation backend for the RevOps maturity self-assessment. Scores the
questionnaire into six dimensions, benchmarks respondents against everyone
who answered before them, and enriches results with an AI-written analysis
and 90-day action plan.
"""

__version__ = "0.1.0"
