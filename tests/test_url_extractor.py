from io import StringIO
from textwrap import dedent

import pytest

from aws_federated_headless_login.common import NoDeviceAuthorizationUrlError
from aws_federated_headless_login.url_extractor import (
    extract_device_authorization_url,
    is_device_authorization_url,
)

aws_cli_output = dedent(
    """
    Attempting to automatically open the SSO authorization page in your
    default browser.
    If the browser does not open or you wish to use a different device to
    authorize this request, open the following URL:

    https://device.sso.us-east-1.amazonaws.com/

    Then enter the code:

    ABCD-EFGH
    Alternatively, you may visit the following URL which will autofill the code upon loading:
    https://device.sso.us-east-1.amazonaws.com/?user_code=ABCD-EFGH
    Successfully logged into Start URL: https://example.awsapps.com/start
    """  # noqa: E501
).lstrip()


@pytest.mark.parametrize(
    "line",
    [
        "https://device.sso.us-east-1.amazonaws.com/?user_code=ABCD-EFGH",
        "https://device.sso.eu-central-1.amazonaws.com/?user_code=ABCDEFGH",
        "https://example.com/device?foo=bar&user_code=WXYZ-QRST",
    ],
)
def test_matching_lines(line):
    assert is_device_authorization_url(line)


@pytest.mark.parametrize(
    "line",
    [
        "https://example.com/foo",
        "https://device.sso.us-east-1.amazonaws.com/",
        "https://device.sso.us-east-1.amazonaws.com/?user_code=",
        "https://device.sso.us-east-1.amazonaws.com/?user_code=abcd-efgh",
        "https://device.sso.us-east-1.amazonaws.com/?user_code=ABCD-EFG",
        "http://device.sso.us-east-1.amazonaws.com/?user_code=ABCD-EFGH",
        "visit https://device.sso.us-east-1.amazonaws.com/?user_code=ABCD-EFGH",
        "ABCD-EFGH",
        "",
    ],
)
def test_non_matching_lines(line):
    assert not is_device_authorization_url(line)


def test_extract_from_aws_cli_output():
    url = extract_device_authorization_url(StringIO(aws_cli_output))
    assert url == (
        "https://device.sso.us-east-1.amazonaws.com/?user_code=ABCD-EFGH"
    )


def test_extract_returns_first_match_without_consuming_rest():
    lines = iter(
        [
            "https://example.com/foo\n",
            "https://a.example.com/?user_code=AAAA-BBBB\n",
            "https://b.example.com/?user_code=CCCC-DDDD\n",
        ]
    )
    url = extract_device_authorization_url(lines)
    assert url == "https://a.example.com/?user_code=AAAA-BBBB"
    assert next(lines) == "https://b.example.com/?user_code=CCCC-DDDD\n"


def test_extract_strips_windows_line_endings():
    url = extract_device_authorization_url(
        ["https://device.example.com/?user_code=ABCD-EFGH\r\n"]
    )
    assert url == "https://device.example.com/?user_code=ABCD-EFGH"


def test_extract_from_exhausted_input():
    with pytest.raises(NoDeviceAuthorizationUrlError):
        extract_device_authorization_url(
            StringIO("https://device.sso.us-east-1.amazonaws.com/\nABCD-EFGH\n")
        )
