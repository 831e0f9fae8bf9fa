"""
GitHub API Client

Handles GitHub API authentication, rate limiting, and communication.
Provides the source-control operations the reviewer consumes: PR metadata,
diffs, commit history, file contents and review submission.
"""

import base64
import time
import logging
from typing import Dict, List, Optional
from datetime import datetime
from urllib.parse import quote
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


logger = logging.getLogger(__name__)

DIFF_MEDIA_TYPE = 'application/vnd.github.v3.diff'
MAX_PR_COMMITS = 250  # GitHub caps the PR commit listing at 250 entries


class HostError(Exception):
    """GitHub API related errors"""
    def __init__(self, message: str, status_code: Optional[int] = None, response_data: Optional[Dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data


class RateLimitExceeded(HostError):
    """GitHub API rate limit exceeded"""
    def __init__(self, reset_time: datetime):
        super().__init__(f"Rate limit exceeded. Resets at {reset_time}", status_code=429)
        self.reset_time = reset_time


class GitHubClient:
    """
    GitHub API client with authentication, rate limiting, and error handling.

    Stateless after construction apart from rate-limit bookkeeping, so a
    single instance can be shared by concurrent content fetches.
    """

    def __init__(self, token: str, base_url: str = "https://api.github.com", timeout: float = 30):
        """
        Initialize GitHub client.

        Args:
            token: GitHub token (PAT or Actions GITHUB_TOKEN)
            base_url: GitHub API base URL (default: https://api.github.com)
            timeout: Per-request timeout in seconds
        """
        if not token:
            raise ValueError("GitHub token is required")

        self.token = token
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = self._create_session()
        self.rate_limit_remaining = 5000
        self.rate_limit_reset = datetime.now()

    @property
    def headers(self) -> Dict[str, str]:
        return dict(self.session.headers)

    def _create_session(self) -> requests.Session:
        """Create requests session with retry strategy and authentication."""
        session = requests.Session()

        # Configure retry strategy
        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[500, 502, 503, 504],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        # Set authentication headers
        session.headers.update({
            'Authorization': f'token {self.token}',
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': 'AI-Code-Reviewer/1.0'
        })

        return session

    def _check_rate_limit(self) -> None:
        """Check and handle GitHub API rate limits."""
        if self.rate_limit_remaining <= 10 and datetime.now() < self.rate_limit_reset:
            wait_time = (self.rate_limit_reset - datetime.now()).total_seconds()
            if wait_time > 0:
                logger.warning(f"Rate limit low ({self.rate_limit_remaining}), resets in {wait_time:.1f}s")
                raise RateLimitExceeded(self.rate_limit_reset)

    def _update_rate_limit(self, response: requests.Response) -> None:
        """Update rate limit information from response headers."""
        if 'X-RateLimit-Remaining' in response.headers:
            self.rate_limit_remaining = int(response.headers['X-RateLimit-Remaining'])

        if 'X-RateLimit-Reset' in response.headers:
            reset_timestamp = int(response.headers['X-RateLimit-Reset'])
            self.rate_limit_reset = datetime.fromtimestamp(reset_timestamp)

    def _make_request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """
        Make authenticated request to GitHub API with rate limiting.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint (without base URL)
            **kwargs: Additional arguments for requests

        Returns:
            Response object

        Raises:
            HostError: For API errors
            RateLimitExceeded: When rate limit is exceeded
        """
        self._check_rate_limit()

        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        kwargs.setdefault('timeout', self.timeout)

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Request failed: {e}")
            raise HostError(f"Request failed: {str(e)}")

        self._update_rate_limit(response)

        if response.status_code == 429 or (
            response.status_code == 403 and response.headers.get('X-RateLimit-Remaining') == '0'
        ):
            reset_time = datetime.fromtimestamp(int(response.headers.get('X-RateLimit-Reset', time.time() + 3600)))
            raise RateLimitExceeded(reset_time)

        if not response.ok:
            try:
                error_data = response.json() if response.content else {}
            except ValueError:
                error_data = {}
            raise HostError(
                f"GitHub API error: {response.status_code} - {error_data.get('message', 'Unknown error')}",
                status_code=response.status_code,
                response_data=error_data
            )

        return response

    def get_pull_request(self, owner: str, repo: str, pr_number: int) -> Dict:
        """
        Get pull request information.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number

        Returns:
            Pull request data
        """
        logger.info(f"Fetching PR {owner}/{repo}#{pr_number}")

        response = self._make_request('GET', f'/repos/{owner}/{repo}/pulls/{pr_number}')
        return response.json()

    def get_pull_request_diff(self, owner: str, repo: str, pr_number: int) -> str:
        """
        Get the full base-to-head diff of a pull request.

        Returns:
            Unified diff text
        """
        logger.info(f"Fetching full diff for {owner}/{repo}#{pr_number}")

        response = self._make_request(
            'GET',
            f'/repos/{owner}/{repo}/pulls/{pr_number}',
            headers={'Accept': DIFF_MEDIA_TYPE}
        )
        return response.text

    def compare_commits_diff(self, owner: str, repo: str, base: str, head: str) -> str:
        """
        Get the diff between two commits.

        Args:
            owner: Repository owner
            repo: Repository name
            base: Base commit SHA or ref
            head: Head commit SHA or ref

        Returns:
            Unified diff text
        """
        logger.info(f"Fetching diff {base[:7]}...{head[:7]} for {owner}/{repo}")

        response = self._make_request(
            'GET',
            f'/repos/{owner}/{repo}/compare/{base}...{head}',
            headers={'Accept': DIFF_MEDIA_TYPE}
        )
        return response.text

    def list_pull_request_commits(self, owner: str, repo: str, pr_number: int) -> List[Dict]:
        """
        Get commits of a pull request, oldest first.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number

        Returns:
            List of commit data
        """
        logger.info(f"Fetching commits for {owner}/{repo}#{pr_number}")

        commits = []
        page = 1
        per_page = 100

        while len(commits) < MAX_PR_COMMITS:
            response = self._make_request(
                'GET',
                f'/repos/{owner}/{repo}/pulls/{pr_number}/commits',
                params={'page': page, 'per_page': per_page}
            )

            page_commits = response.json()
            if not page_commits:
                break

            commits.extend(page_commits)

            if len(page_commits) < per_page:
                break

            page += 1

        logger.info(f"Found {len(commits)} commits")
        return commits

    def get_file_content(
        self,
        owner: str,
        repo: str,
        path: str,
        ref: str,
        max_bytes: Optional[int] = None
    ) -> Optional[str]:
        """
        Get decoded content of a file at a given ref.

        Args:
            owner: Repository owner
            repo: Repository name
            path: File path inside the repository
            ref: Commit SHA, branch or tag
            max_bytes: Skip files larger than this

        Returns:
            File content, or None when the file is missing, a directory,
            binary, or above the size limit
        """
        logger.debug(f"Fetching content of {path}@{ref[:7] if ref else ref}")

        try:
            response = self._make_request(
                'GET',
                f'/repos/{owner}/{repo}/contents/{quote(path)}',
                params={'ref': ref}
            )
        except HostError as e:
            if e.status_code == 404:
                logger.debug(f"File not found: {path}")
                return None
            raise

        data = response.json()
        if not isinstance(data, dict) or data.get('type', 'file') != 'file':
            logger.debug(f"Not a regular file: {path}")
            return None

        if max_bytes is not None and data.get('size', 0) > max_bytes:
            logger.info(f"Skipping {path}: {data.get('size')} bytes exceeds limit of {max_bytes}")
            return None

        # Files above 1MB come back without inline content
        if data.get('encoding') != 'base64' or not data.get('content'):
            return None

        try:
            return base64.b64decode(data['content']).decode('utf-8')
        except (ValueError, UnicodeDecodeError):
            logger.debug(f"Skipping binary file: {path}")
            return None

    def create_review(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        comments: List[Dict],
        commit_id: Optional[str] = None,
        event: str = "COMMENT",
        body: Optional[str] = None
    ) -> Dict:
        """
        Submit a pull request review with inline comments in a single call.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number
            comments: List of {path, line, body} comment payloads
            commit_id: Commit the review applies to
            event: Review event (COMMENT, APPROVE, REQUEST_CHANGES)
            body: Optional top-level review body

        Returns:
            Created review data
        """
        logger.info(f"Submitting review with {len(comments)} comments to {owner}/{repo}#{pr_number}")

        payload = {'event': event, 'comments': comments}
        if commit_id:
            payload['commit_id'] = commit_id
        if body:
            payload['body'] = body

        response = self._make_request(
            'POST',
            f'/repos/{owner}/{repo}/pulls/{pr_number}/reviews',
            json=payload
        )
        return response.json()

