"""gtasks - Google Tasks from the terminal.

Usage:
    from gtasks.config import load_settings
    from gtasks.google import CredentialStore, build_tasks_service
    from gtasks.tasks import TasksClient

    settings = load_settings()
    store = CredentialStore(settings.token_path, settings.credentials_path)
    client = TasksClient(build_tasks_service(store.ensure_fresh(store.load())))
    for tasklist in client.list_task_lists():
        print(tasklist.title)
"""

__version__ = "0.3.0"
