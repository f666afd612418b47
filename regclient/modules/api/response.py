"""Map registry responses onto the error taxonomy."""

import httpx

from regclient.errors import (
    AuthChallengeUnparsable,
    ChallengeParseError,
    NotFound,
    UnexpectedStatus,
    parse_api_errors,
)
from regclient.modules.auth import parse_challenge


def check_response(resp: httpx.Response) -> httpx.Response:
    """
    Return 2xx responses unchanged, raise for everything else.

    Raises:
        NotFound: 404
        AuthChallengeUnparsable: 401 without a usable Bearer challenge
        UnexpectedStatus: any other non-2xx status
    """
    if resp.is_success:
        return resp

    errors = parse_api_errors(resp.content)
    url = str(resp.request.url)

    if resp.status_code == 404:
        raise NotFound(404, errors, url=url)

    if resp.status_code == 401:
        try:
            parse_challenge(resp.headers.get("WWW-Authenticate"))
        except ChallengeParseError as e:
            raise AuthChallengeUnparsable(401, errors, url=url) from e

    raise UnexpectedStatus(resp.status_code, errors, url=url)
