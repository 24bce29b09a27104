"""MCP Prompts: pre-built interaction templates for coverage shopping journeys."""

from __future__ import annotations

from fastmcp import FastMCP


def register_insurance_prompts(mcp: FastMCP) -> None:
    """Register insurance domain MCP prompts."""

    @mcp.prompt()
    def coverage_checkup_prompt() -> str:
        """Prompt template for a full household coverage review."""
        return """I'd like help choosing health coverage for my household. Please:

1. Ask me where we live during the year and for how many months in each place
2. Ask for everyone's ages and whether any adult uses tobacco
3. Ask about our expected doctor visits, prescriptions and any planned procedures
4. Recommend coverage with an estimated monthly cost range
5. Explain the alternatives and the next steps I should take

Please keep the explanations plain and tell me which numbers are estimates."""

    @mcp.prompt()
    def plan_showdown_prompt(plan_a_name: str = "Plan A", plan_b_name: str = "Plan B") -> str:
        """Prompt template for comparing two specific plans."""
        return f"""I'm deciding between {plan_a_name} and {plan_b_name}. I'd like to:

1. See the premiums, deductibles and out-of-pocket maximums side by side
2. Know what each would cost me in a healthy year and in a bad year
3. Understand the network differences
4. Get a clear recommendation and the caveats that come with it

I'll share the plan details. Ask me about my expected usage if it would change the answer."""

    @mcp.prompt()
    def job_change_prompt(months_since_job_loss: int = 0) -> str:
        """Prompt template for the COBRA versus marketplace decision."""
        return f"""I left my job {months_since_job_loss} month(s) ago and need to decide about COBRA. Please:

1. Ask what I paid for my employer plan each month
2. Ask whether anyone in my family is in ongoing treatment
3. Estimate what marketplace coverage would cost us
4. Tell me whether COBRA is worth keeping and when I should drop it

I want to avoid any gap in coverage."""

    @mcp.prompt()
    def what_if_prompt(change: str = "we have a baby") -> str:
        """Prompt template for a what-if scenario comparison."""
        return f"""What would happen to our health insurance costs if {change}?

Compare our current situation with that scenario. Show me the cost difference per month
and per year, whether our risk changes, and whether the recommended coverage changes."""
