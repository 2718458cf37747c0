import json

from fixer.webhooks.schemas import FailureNotification

FENCE = "```"

RESPONSE_TEMPLATE = """Respond in this exact format:
ANALYSIS: [brief explanation of what went wrong]
ROOT_CAUSE: [why it happened]
CONFIDENCE: [low/medium/high]
FIXED_PAYLOAD:
{fence}json
{{
  "name": {event_name},
  "data": {{
    [corrected data object here]
  }}
}}
{fence}
"""


def build_prompt(notification: FailureNotification) -> str:
    event_data = json.dumps(notification.event_data, indent=2, default=str)

    parts = [
        "You are debugging an Inngest function failure.",
        "",
        f"Function ID: {notification.function_id}",
        f"Event Name: {notification.event_name}",
        "",
        f"Error Message: {notification.error_message}",
        f"Error Type: {notification.error_name}",
        "",
        "Original Event Payload:",
        f"{FENCE}json",
        event_data,
        FENCE,
        "",
    ]
    if notification.error_stack:
        parts += ["Stack Trace:", FENCE, notification.error_stack, FENCE, ""]

    parts += [
        "Your task:",
        "1. Identify what field(s) are missing or incorrect",
        "2. Explain the root cause in simple terms",
        "3. Provide a FIXED version of the event.data payload",
        "4. Rate your confidence (low/medium/high)",
        "",
        RESPONSE_TEMPLATE.format(fence=FENCE, event_name=json.dumps(notification.event_name)),
    ]
    return "\n".join(parts)
