"""
Processor — the extraction → validation → generation pipeline.

    validation    single-declaration structural rules
    discovery     marked declarations → ProcessingResult
    aggregate     domain rules over the whole result
    dispatch      TypeMeta → four artifacts → host
    orchestrator  one round, start to finish
"""
