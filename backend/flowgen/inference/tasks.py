from dataclasses import dataclass
from typing import Callable, Dict

from flowgen.inference.prompt import SYSTEM_PROMPT, USER_PROMPT_TEMPLATE

ORCHESTRATE_WORKFLOW_TASK = "automation.orchestrate_workflow_v1"


@dataclass(frozen=True)
class TaskDefinition:
    id: str
    description: str
    system_prompt: str
    user_prompt: Callable[[dict], str]
    temperature: float = 0.2
    max_tokens: int = 2000
    json_mode: bool = False


TASKS: Dict[str, TaskDefinition] = {
    ORCHESTRATE_WORKFLOW_TASK: TaskDefinition(
        id=ORCHESTRATE_WORKFLOW_TASK,
        description="Generate a complete automation workflow from a natural language description.",
        system_prompt=SYSTEM_PROMPT,
        user_prompt=lambda payload: USER_PROMPT_TEMPLATE.format(
            user_prompt=payload.get("userPrompt", "")
        ),
        temperature=0.3,
        max_tokens=4000,
        json_mode=True,
    ),
}


def get_task(task_type: str) -> TaskDefinition:
    try:
        return TASKS[task_type]
    except KeyError:
        raise KeyError(f"Unknown engine task '{task_type}'") from None
