"""
Sales Plan Review Loop Agent - ADK

Writer drafts a plan-vs-actual review from board tools, then a critic/refiner
loop tightens it until the critic signs off; the final markdown is saved.
"""

from pathlib import Path

from google.adk.agents import LlmAgent, LoopAgent, SequentialAgent
from google.adk.agents.callback_context import CallbackContext
from google.adk.models.lite_llm import LiteLlm
from google.adk.tools.tool_context import ToolContext

from .plan_tools import fetch_plan_summary, investigate_plan_performance
from .settings import model_name

MODEL = model_name()

# --- State Keys ---
STATE_CURRENT_DOC = "current_document"
STATE_CRITICISM = "criticism"
COMPLETION_PHRASE = "No major issues found."

REPORT_FILE = "latest_plan_review.md"


def _resolve_current_document(state) -> str:
    """Get current document from direct or namespaced state keys."""
    markdown = state.get(STATE_CURRENT_DOC) if hasattr(state, "get") else None
    if isinstance(markdown, str) and markdown.strip():
        return markdown

    state_dict = state.to_dict() if hasattr(state, "to_dict") else dict(state or {})
    for key, value in state_dict.items():
        if key.endswith(f".{STATE_CURRENT_DOC}") and isinstance(value, str) and value.strip():
            return value
    return ""


def _save_review_markdown(markdown: str) -> dict:
    """Save markdown to retail_agents/outputs/reports/latest_plan_review.md."""
    output_dir = Path(__file__).resolve().parents[1] / "outputs" / "reports"
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / REPORT_FILE
    output_path.write_text(markdown, encoding="utf-8")
    result = {
        "saved_to": str(output_path),
        "chars_written": len(markdown),
    }
    print("_save_review_markdown:", result)
    return result


def exit_loop(tool_context: ToolContext):
    """Call this function ONLY when the critique indicates no further changes are needed."""
    print(f"  [Tool Call] exit_loop triggered by {tool_context.agent_name}")
    markdown = _resolve_current_document(tool_context.state or {})
    if markdown:
        _save_review_markdown(markdown)
    else:
        print("exit_loop: no non-empty current_document found in state.")
    tool_context.actions.escalate = True
    return {}


def save_review_after_loop(callback_context: CallbackContext):
    """Persist the latest review once the loop finishes, whichever way it ended."""
    markdown = _resolve_current_document(callback_context.state)
    if markdown:
        _save_review_markdown(markdown)
    return None


review_initial_agent = LlmAgent(
    name="plan_review_initial",
    model=LiteLlm(model=MODEL),
    include_contents="default",
    instruction="""
    You are a retail planning analyst reviewing daily sales against plan.

    FIRST: Call investigate_plan_performance with best-effort parameters from the user's prompt.
    - Pass region (Total, SH, JS) when mentioned; the default is the store-weighted network.
    - Pass start_date/end_date (YYYY-MM-DD) when the prompt names a window.

    SECOND: Write a complete first-pass review grounded in the tool output.
    Use this exact section structure:
    1) "## Plan Review - <region> <start_date>..<end_date>"
    2) "### Summary"
    3) "### Group Breakdown"
    4) "### Leaders and Laggards"
    5) "### Outlook"

    Requirements:
    - Report achievement rate, average daily actual and average daily plan for elapsed days.
    - Report average daily plan for the remaining days when has_future is true.
    - When has_past is false, say there is no elapsed data instead of reporting zeros.
    - Name the best and worst leaf category by achievement rate with their rates.
    - Mention at least one anomaly candidate with its date and deviation.
    - One action for the laggard, one for the leader.
    - No placeholders.

    Output *only* the review text.
    """,
    description="Writes a first-pass plan review grounded in board data.",
    tools=[investigate_plan_performance, fetch_plan_summary],
    output_key=STATE_CURRENT_DOC,
)

review_critic_agent = LlmAgent(
    name="plan_review_critic",
    model=LiteLlm(model=MODEL),
    include_contents="none",
    instruction=f"""
    You are a constructive critic reviewing a sales plan review draft.

    **Document to Review:**
    ```
    {{{{current_document}}}}
    ```

    **Completion Criteria (ALL must be met):**
    1. Uses the five required sections
    2. States achievement rate with average actual vs average plan
    3. Separates elapsed days from remaining planned days
    4. Names a leading and a lagging category with numbers
    5. Cites at least one dated anomaly
    6. Gives one action for the laggard and one for the leader
    7. Contains no placeholders like "TBD", "N/A", or "<...>"

    IF any criterion is NOT met, output specific feedback only.
    IF ALL criteria are met, respond *exactly* with: "{COMPLETION_PHRASE}"
    """,
    description="Reviews the current draft and either critiques it or signals completion.",
    output_key=STATE_CRITICISM,
)

review_refiner_agent = LlmAgent(
    name="plan_review_refiner",
    model=LiteLlm(model=MODEL),
    include_contents="none",
    instruction=f"""
    You are a retail planning analyst refining a plan review OR exiting the process.
    **Current Document:**
    ```
    {{{{current_document}}}}
    ```
    **Critique/Suggestions:**
    {{{{criticism}}}}

    IF the critique is *exactly* "{COMPLETION_PHRASE}":
    You MUST call the 'exit_loop' function.
    Then output the current document unchanged: {{{{current_document}}}}
    ELSE:
    FIRST: Call investigate_plan_performance with the region and window already used in the draft.
    SECOND: Call fetch_plan_summary for any group or category the critique asks about.
    THIRD: Apply the suggestions and output *only* the refined review text,
    keeping the same five sections and markdown line breaks.
    Do not invent metrics the tools did not return.
    """,
    description="Refines the review from critique, or calls exit_loop when the critic signs off.",
    tools=[exit_loop, investigate_plan_performance, fetch_plan_summary],
    output_key=STATE_CURRENT_DOC,
)

review_loop_agent = LoopAgent(
    name="plan_review_loop",
    sub_agents=[review_critic_agent, review_refiner_agent],
    max_iterations=3,
    after_agent_callback=save_review_after_loop,
)

root_agent = SequentialAgent(
    name="plan_review",
    sub_agents=[review_initial_agent, review_loop_agent],
    description="Drafts a sales plan review, refines it with critique, and saves the final markdown.",
)
