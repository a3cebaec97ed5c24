from api.exception import PermissionDenied
from models import utc_now_iso


def save_tasks_summary(store, uid, summary_text):
    """One summary per user; each save overwrites the previous one."""
    if not uid:
        raise PermissionDenied()
    return store.put('summaries', uid, {
        'summary': summary_text,
        'updatedAt': utc_now_iso(),
    })


def get_tasks_summary(store, uid):
    record = store.get('summaries', uid)
    if record is None:
        return None
    return {'summary': record.get('summary') or '', 'updatedAt': record.get('updatedAt') or ''}
