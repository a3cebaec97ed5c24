"""
Task backlog summaries.

The prompt is built from the user's projects, tasks and task notes. It goes to
the summary proxy first, then straight to the generative-AI endpoint, and if
both fail the raw prompt is handed back so the user can submit it by hand.
"""
from dataclasses import dataclass, field
import logging

import requests

from api.exception import UpstreamError, ValidationError
from models import TaskStatus
from services import projects as project_service
from services import summaries as summary_service
from services import task_notes as task_note_service
from services import tasks as task_service
from services.gemini import GeminiClient
from services.model_text import extract_model_text

logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "Based on the tasks above, please write:\n"
    "1. An executive summary of the overall progress.\n"
    "2. The top risks or blockers.\n"
    "3. Prioritized recommendations for the next steps."
)

PROMPT_FALLBACK_MESSAGE = (
    "The summary service is unavailable. Copy the prompt below and submit it manually."
)


def build_tasks_prompt(projects, tasks, task_notes=None, project_id=None):
    """
    projects: list of project records; tasks: list of task records;
    task_notes: mapping task id -> list of task note records.
    """
    task_notes = task_notes or {}
    project_names = {p['id']: p.get('name') or p['id'] for p in projects}
    if project_id:
        tasks = [t for t in tasks if t.get('projectId') == project_id]

    if project_id and project_id in project_names:
        lines = [f"Here are the tasks of the project \"{project_names[project_id]}\", grouped by status."]
    else:
        lines = ["Here are all of my tasks, grouped by status."]

    if not tasks:
        lines.append("")
        lines.append("There are no tasks yet.")

    for status in TaskStatus:
        group = [t for t in tasks if t.get('status') == status.value]
        if not group:
            continue
        lines.append("")
        lines.append(f"## {status.value} ({len(group)})")
        for task in group:
            line = f"- [{project_names.get(task.get('projectId'), 'No project')}] {task.get('title', '')}"
            if task.get('description'):
                line += f": {task['description']}"
            lines.append(line)
            for note in task_notes.get(task['id'], []):
                lines.append(f"    - Note: {note.get('content', '')}")

    lines.append("")
    lines.append(INSTRUCTIONS)
    return '\n'.join(lines)


@dataclass
class SummaryOutcome:
    text: str
    # proxy | direct | prompt
    source: str
    prompt: str
    error: str = None
    saved: bool = False
    attempts: list = field(default_factory=list)

    def to_dict(self):
        return {
            'text': self.text,
            'source': self.source,
            'prompt': self.prompt,
            'error': self.error,
            'saved': self.saved,
            'attempts': self.attempts,
        }


class SummaryOrchestrator:
    def __init__(self, store, config, session=None):
        self.store = store
        self.config = config
        self.session = session or requests.Session()
        self.timeout = config.get('HTTP_TIMEOUT', 30)

    def collect(self, uid, project_id=None):
        projects = project_service.get_projects_for_user(self.store, uid, uid)
        if project_id:
            projects = [p for p in projects if p['id'] == project_id]
            if not projects:
                project_service.require_owned_project(self.store, uid, project_id)

        tasks = []
        for project in projects:
            tasks.extend(task_service.get_tasks_for_project(self.store, uid, project['id']))
        notes = {
            task['id']: task_note_service.get_notes_for_task(self.store, uid, task['id'])
            for task in tasks
        }
        return projects, tasks, notes

    def call_proxy(self, prompt):
        url = self.config.get('SUMMARY_PROXY_URL')
        if not url:
            raise UpstreamError("Summary proxy not configured")
        body = {'prompt': prompt}
        if self.config.get('GEMINI_MODEL'):
            body['model'] = self.config['GEMINI_MODEL']
        response = self.session.post(url, json=body, timeout=self.timeout)
        data = response.json()
        if response.status_code != 200 or not data.get('ok'):
            raise UpstreamError(data.get('error') or f"Proxy answered HTTP {response.status_code}")
        return data.get('result')

    def call_direct(self, prompt):
        client = GeminiClient.from_config(self.config, session=self.session)
        if not client.configured:
            raise UpstreamError("Generative-AI API not configured")
        return client.generate(prompt)

    def generate(self, uid, project_id=None):
        projects, tasks, notes = self.collect(uid, project_id)
        prompt = build_tasks_prompt(projects, tasks, notes, project_id)

        payload = None
        source = None
        attempts = []
        for name, call in (('proxy', self.call_proxy), ('direct', self.call_direct)):
            try:
                payload = call(prompt)
                source = name
                break
            except (requests.RequestException, ValueError, AttributeError,
                    UpstreamError, ValidationError) as e:
                logger.warning("Summary %s call failed: %s", name, e)
                attempts.append({'source': name, 'error': str(e)})

        if source is None:
            return SummaryOutcome(
                text=prompt,
                source='prompt',
                prompt=prompt,
                error=PROMPT_FALLBACK_MESSAGE,
                attempts=attempts,
            )

        text = extract_model_text(payload)
        outcome = SummaryOutcome(text=text, source=source, prompt=prompt, attempts=attempts)
        try:
            summary_service.save_tasks_summary(self.store, uid, text)
            outcome.saved = True
        except Exception as e:
            logger.error("Could not save summary for %s: %s", uid, e, exc_info=True)
            outcome.error = "The summary was generated but could not be saved."
        return outcome
