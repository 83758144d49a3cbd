from __future__ import annotations


def build_repo_path(repo: str, org_id: str | None = None, project_id: str | None = None) -> str:
    """Return the Harness Code path segment that addresses ``repo``.

    With both an org and a project configured, ``repo`` may already carry
    zero, one or two levels of that hierarchy:

        repo              -> {org}/{project}/+/repos/repo
        project/repo      -> {org}/project/+/repos/repo
        org/project/repo  -> org/project/+/repos/repo

    Without org/project scope the repository is account-level and ``repo``
    is returned unchanged, empty string included.
    """
    if not (org_id and project_id):
        return repo

    parts = repo.split("/")
    if len(parts) == 1:
        return f"{org_id}/{project_id}/+/repos/{repo}"
    if len(parts) == 2:
        return f"{org_id}/{parts[0]}/+/repos/{parts[1]}"
    return f"{parts[0]}/{parts[1]}/+/repos/{'/'.join(parts[2:])}"
