from staged_review.domains.review.chain import ReviewChain
from staged_review.domains.review.prompt import (
    EMPTY_DIFF_PROMPT,
    SYSTEM_INSTRUCTION,
    USER_INSTRUCTION,
    build_review_messages,
    build_review_prompt,
)


def test_build_review_prompt_embeds_instructions_and_diff() -> None:
    diff = "@@ -1 +1 @@\n-a := 1\n+a := 2"

    prompt = build_review_prompt(diff)

    assert prompt.startswith(SYSTEM_INSTRUCTION)
    assert USER_INSTRUCTION in prompt
    assert prompt.endswith(f"```diff\n{diff}\n```")
    assert "## Main risks and issues" in prompt


def test_build_review_prompt_strips_surrounding_whitespace() -> None:
    assert build_review_prompt("\n+x\n\n") == build_review_prompt("+x")


def test_build_review_prompt_empty_diff() -> None:
    assert build_review_prompt("") == EMPTY_DIFF_PROMPT
    assert build_review_prompt("  \n") == EMPTY_DIFF_PROMPT


def test_build_review_messages_pair() -> None:
    messages = build_review_messages("+func f() {}")

    assert [m["role"] for m in messages] == ["system", "user"]
    assert messages[0]["content"] == SYSTEM_INSTRUCTION
    assert messages[1]["content"].startswith(USER_INSTRUCTION)
    assert "+func f() {}" in messages[1]["content"]


class _RecordingLLM:
    def __init__(self) -> None:
        self.prompts = []

    def chat(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return "ok"


def test_review_chain_sends_built_prompt() -> None:
    llm = _RecordingLLM()

    result = ReviewChain(llm_client=llm).invoke("+x")

    assert result == "ok"
    assert llm.prompts == [build_review_prompt("+x")]
