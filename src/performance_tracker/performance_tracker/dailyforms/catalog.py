"""Organization-wide standard checklist every daily form is seeded with."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple

from ..core.enums import TaskFrequency
from .model import StandardTaskEntry

DISCIPLINARY = "Disciplinary Tasks"
CLIENT_HANDLING = "Client Handling"
PROJECT_RELATED = "Project Related"
MANAGEMENT_RELATED = "Management Related"


@dataclass(frozen=True)
class StandardTask:
    task_id: str
    label: str
    category: str
    frequency: TaskFrequency = TaskFrequency.DAILY


STANDARD_TASKS: Tuple[StandardTask, ...] = (
    StandardTask("attended_morning", "Attended morning session", DISCIPLINARY),
    StandardTask("came_on_time", "Came on time", DISCIPLINARY),
    StandardTask("worked_on_project", "Worked on my project", CLIENT_HANDLING),
    StandardTask("asked_new_project", "Asked senior team for new project", PROJECT_RELATED),
    StandardTask("got_code_corrected", "Got code corrected", MANAGEMENT_RELATED),
    StandardTask("updated_client", "Updated client", CLIENT_HANDLING),
    StandardTask("worked_training", "Worked on training task", PROJECT_RELATED),
    StandardTask("updated_senior", "Updated senior team", MANAGEMENT_RELATED),
    StandardTask("updated_progress", "Updated daily progress", MANAGEMENT_RELATED),
    StandardTask("plan_next_day", "Planned next day's tasks", MANAGEMENT_RELATED),
    StandardTask("completed_all", "Completed all tasks for the day", MANAGEMENT_RELATED),
    StandardTask("multiple_projects", "Worked on more than 1 project (if assigned)", PROJECT_RELATED),
    StandardTask("tasks_for_day", "Listed tasks for the day", PROJECT_RELATED),
    StandardTask("inform_unable", "Informed when unable to do the project", MANAGEMENT_RELATED),
    StandardTask("project_given_elsewhere", "Made sure the project was handed to someone else", MANAGEMENT_RELATED),
    StandardTask("project_on_time", "Made sure the project was on time", MANAGEMENT_RELATED),
    StandardTask("inform_bunking", "Informed before taking the day off", DISCIPLINARY),
    StandardTask("inform_late", "Informed before coming late", DISCIPLINARY),
    StandardTask("inform_left_meeting", "Informed when leaving the meeting", DISCIPLINARY),
    StandardTask("freelancer_needed", "Checked whether a freelancer is needed", PROJECT_RELATED),
    StandardTask("freelancer_hired", "Made sure the freelancer was hired", PROJECT_RELATED),
    StandardTask("whatsapp_group", "Joined the client's WhatsApp group the same day", CLIENT_HANDLING),
    StandardTask("slack_group", "Slack group created for the project", PROJECT_RELATED),
    StandardTask("onedrive_files", "Added relevant files to OneDrive", MANAGEMENT_RELATED),
    StandardTask("check_assigned", "Checked the project is not already assigned", PROJECT_RELATED),
    StandardTask("choose_supervisor", "Chose own supervisor", MANAGEMENT_RELATED),
    StandardTask("check_priority", "Checked the project is still on and in priority", PROJECT_RELATED),
    StandardTask("client_followup", "Followed up with the client", CLIENT_HANDLING),
    StandardTask("made_tasks", "Created all tasks for the project", PROJECT_RELATED),
    StandardTask("assign_deadlines", "Assigned deadlines for each task", PROJECT_RELATED),
    StandardTask("record_loom", "Recorded all relevant Loom videos", PROJECT_RELATED),
    StandardTask("organize_loom", "Organized Loom videos", PROJECT_RELATED),
    StandardTask("deadline_followed", "Deadline was followed", PROJECT_RELATED),
    StandardTask("screensharing", "Was screensharing and working at all times", DISCIPLINARY),
)


def seed_tasks() -> Tuple[StandardTaskEntry, ...]:
    """Fresh standard entries with both checkmarks cleared."""

    return tuple(
        StandardTaskEntry(
            item_id=t.task_id,
            label=t.label,
            category=t.category,
            frequency=t.frequency,
        )
        for t in STANDARD_TASKS
    )


def default_template() -> dict[str, Any]:
    return {
        "standard_tasks": [
            {
                "id": t.task_id,
                "label": t.label,
                "category": t.category,
                "frequency": t.frequency.value,
            }
            for t in STANDARD_TASKS
        ],
        "custom_tasks": [],
        "custom_tags": [],
        "settings": {
            "require_entry_time": True,
            "require_exit_time": True,
            "allow_custom_tasks": True,
            "allow_custom_tags": True,
        },
    }
