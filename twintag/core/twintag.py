"""
Entry point tying a project to its template view and public subdomain.
"""
from typing import Optional

from twintag.config.environment import Environment, environment as default_environment
from twintag.core.project import Project
from twintag.core.view import View


class Twintag:
    """
    A project published under ``https://<subdomain>.twintag.io``.

    Attributes:
        project: Project authorized with the project API key
        view: Template view of the project
        subdomain: Public subdomain
        template_view_qid: Qid of the template view
    """

    protocol = "https://"

    def __init__(self, project_api_key: str, template_view_qid: str, subdomain: str,
                 environment: Optional[Environment] = None):
        self.environment = environment or default_environment
        self.template_view_qid = template_view_qid
        self.subdomain = subdomain
        self.project = Project(project_api_key, environment=self.environment)
        self.view = View(template_view_qid, project=self.project, environment=self.environment)

    def url(self, path: str) -> str:
        """
        Public URL of a path.

        Args:
            path: Relative URL path starting with ``/``; ``/`` addresses the template view

        Raises:
            ValueError: If the path does not start with ``/``
        """
        if not path.startswith("/"):
            raise ValueError(f"bad path; have '{path}'; must start with '/'")
        if path == "/":
            return f"{self.protocol}{self.subdomain}.twintag.io/{self.template_view_qid}"
        return f"{self.protocol}{self.subdomain}.twintag.io{path}"

    def set_host(self, host: str) -> None:
        self.environment.host = host

    def set_admin_host(self, host: str) -> None:
        self.environment.admin_host = host

    def set_log_level(self, level: str) -> str:
        """Set the transport log level; returns the previous one."""
        return self.environment.set_log_level(level)

    def __repr__(self) -> str:
        return f"Twintag(subdomain={self.subdomain!r}, template_view_qid={self.template_view_qid!r})"
