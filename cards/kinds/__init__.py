from . import text, mc_question, fill_in_blank, infographic, interactive_visual, oral_exam

BUILTIN_CARD_TYPES = [
    text.CARD_TYPE,
    mc_question.CARD_TYPE,
    fill_in_blank.CARD_TYPE,
    infographic.CARD_TYPE,
    interactive_visual.CARD_TYPE,
    oral_exam.CARD_TYPE,
]

__all__ = ['BUILTIN_CARD_TYPES']
