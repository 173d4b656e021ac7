"""
Interview prompts — the seed instruction, the closing synthesis request and
the command that ends the question loop.
"""

TERMINATION_COMMAND = "/finish"

FRAMING_PROMPT = (
    "Ask me one question at a time so we can develop a thorough, step-by-step spec "
    "for this idea. Each question should build on my previous answers, and our end "
    "goal is to have a detailed specification I can hand off to a developer. Let's do "
    "this iteratively and dig into every relevant detail. Remember, only one question "
    "at a time. Here's the idea: {idea}"
)

SYNTHESIS_PROMPT = (
    "Now that we've wrapped up the brainstorming process, can you compile our "
    "findings into a comprehensive, developer-ready specification?"
)

EXTENDED_SYNTHESIS_PROMPT = (
    SYNTHESIS_PROMPT
    + " Include all relevant requirements, architecture choices, data handling "
    "details, error handling strategies, and a testing plan so a developer can "
    "immediately begin implementation."
)


def framing_prompt(idea: str) -> str:
    return FRAMING_PROMPT.format(idea=idea)


def synthesis_prompt(extended: bool = False) -> str:
    return EXTENDED_SYNTHESIS_PROMPT if extended else SYNTHESIS_PROMPT


def is_termination(text: str) -> bool:
    """True for ``/finish`` in any case, ignoring surrounding whitespace."""
    return text.strip().casefold() == TERMINATION_COMMAND
