"""
Tests for the Gmail adapter: pagination, message mapping, mutations,
and OAuth token handling. The googleapiclient resource is mocked.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock, Mock, call, patch

import pytest

from gmailrouter.domain.errors import AuthError
from gmailrouter.infrastructure.gmail.auth import GMAIL_SCOPES, GmailAuthenticator, GmailOAuthConfig
from gmailrouter.infrastructure.gmail.client import GmailMailClient, inbox_query
from gmailrouter.infrastructure.gmail.mapper import gmail_to_mail_message

SINCE = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def service():
    return MagicMock()


def messages_api(service):
    return service.users.return_value.messages.return_value


class TestListMessageRefs:
    def test_query_uses_epoch_seconds(self):
        since = datetime(2024, 3, 7, 15, 30, 12, 500000, tzinfo=timezone.utc)
        assert inbox_query(since) == "in:inbox after:1709825412"

    def test_query_keeps_time_of_day(self):
        morning = datetime(2024, 3, 7, 8, 0, tzinfo=timezone.utc)
        evening = datetime(2024, 3, 7, 20, 0, tzinfo=timezone.utc)
        assert inbox_query(morning) != inbox_query(evening)

    def test_exhausts_three_pages(self, service):
        api = messages_api(service)
        api.list.return_value.execute.side_effect = [
            {"messages": [{"id": "a"}, {"id": "b"}], "nextPageToken": "t1"},
            {"messages": [{"id": "c"}], "nextPageToken": "t2"},
            {"messages": [{"id": "d"}, {"id": "e"}]},
        ]

        refs = GmailMailClient(service).list_message_refs(SINCE)

        assert refs == ["a", "b", "c", "d", "e"]
        assert api.list.call_args_list == [
            call(userId="me", q="in:inbox after:1704067200"),
            call(userId="me", q="in:inbox after:1704067200", pageToken="t1"),
            call(userId="me", q="in:inbox after:1704067200", pageToken="t2"),
        ]

    def test_duplicates_across_pages_dropped(self, service):
        messages_api(service).list.return_value.execute.side_effect = [
            {"messages": [{"id": "a"}, {"id": "b"}], "nextPageToken": "t1"},
            {"messages": [{"id": "b"}, {"id": "c"}]},
        ]

        assert GmailMailClient(service).list_message_refs(SINCE) == ["a", "b", "c"]

    def test_empty_inbox(self, service):
        messages_api(service).list.return_value.execute.return_value = {"resultSizeEstimate": 0}

        assert GmailMailClient(service).list_message_refs(SINCE) == []

    def test_api_error_propagates(self, service):
        messages_api(service).list.return_value.execute.side_effect = [
            {"messages": [{"id": "a"}], "nextPageToken": "t1"},
            RuntimeError("500 backend error"),
        ]

        with pytest.raises(RuntimeError, match="500"):
            GmailMailClient(service).list_message_refs(SINCE)


class TestFetchAndMutate:
    def test_fetch_maps_headers(self, service):
        api = messages_api(service)
        api.get.return_value.execute.return_value = {
            "id": "m1",
            "snippet": "hi",
            "payload": {"headers": [{"name": "To", "value": "a@example.com"}, {"name": "Subject", "value": "S"}]},
        }

        msg = GmailMailClient(service).fetch_message("m1")

        api.get.assert_called_once_with(userId="me", id="m1", format="full")
        assert msg.ref == "m1"
        assert msg.get_all("to") == ["a@example.com"]
        assert msg.get("Subject") == "S"

    def test_fetch_keeps_requested_ref(self, service):
        messages_api(service).get.return_value.execute.return_value = {"payload": {"headers": []}}

        assert GmailMailClient(service).fetch_message("m9").ref == "m9"

    def test_delete(self, service):
        GmailMailClient(service).delete_message("m1")
        messages_api(service).delete.assert_called_once_with(userId="me", id="m1")

    def test_mark_as_spam(self, service):
        GmailMailClient(service).mark_as_spam("m1")
        messages_api(service).modify.assert_called_once_with(
            userId="me", id="m1", body={"addLabelIds": ["SPAM"], "removeLabelIds": ["INBOX"]}
        )


class TestMapper:
    def test_no_payload_means_no_headers(self):
        assert gmail_to_mail_message({"id": "m1"}).headers is None

    def test_payload_without_headers(self):
        assert gmail_to_mail_message({"id": "m1", "payload": {"mimeType": "text/plain"}}).headers is None

    def test_incomplete_headers_dropped(self):
        msg = gmail_to_mail_message({"id": "m1", "payload": {"headers": [{"name": "To"}, {"name": "From", "value": "x"}]}})
        assert [h.name for h in msg.headers] == ["From"]


class TestAuthenticator:
    @pytest.fixture
    def cfg(self, tmp_path):
        return GmailOAuthConfig(client_secrets_path=tmp_path / "client_secret.json", token_path=tmp_path / "token.json")

    def test_valid_cached_token(self, cfg):
        cfg.token_path.write_text("{}")
        creds = Mock(valid=True)

        with patch("gmailrouter.infrastructure.gmail.auth.Credentials") as mock_creds:
            mock_creds.from_authorized_user_file.return_value = creds
            assert GmailAuthenticator(cfg).authorize() is creds

        mock_creds.from_authorized_user_file.assert_called_once_with(str(cfg.token_path), GMAIL_SCOPES)

    def test_expired_token_is_refreshed_and_saved(self, cfg):
        cfg.token_path.write_text("{}")
        creds = Mock(valid=False, expired=True, refresh_token="r")

        def refresh(_request):
            creds.valid = True

        creds.refresh.side_effect = refresh
        creds.to_json.return_value = '{"token": "new"}'

        with patch("gmailrouter.infrastructure.gmail.auth.Credentials") as mock_creds:
            mock_creds.from_authorized_user_file.return_value = creds
            assert GmailAuthenticator(cfg).authorize() is creds

        assert cfg.token_path.read_text() == '{"token": "new"}'

    def test_runs_consent_flow_without_token(self, cfg):
        cfg.client_secrets_path.write_text("{}")
        creds = Mock(valid=True)
        creds.to_json.return_value = '{"token": "t"}'

        with patch("gmailrouter.infrastructure.gmail.auth.InstalledAppFlow") as mock_flow:
            mock_flow.from_client_secrets_file.return_value.run_local_server.return_value = creds
            assert GmailAuthenticator(cfg).authorize() is creds

        mock_flow.from_client_secrets_file.return_value.run_local_server.assert_called_once_with(port=14500)
        assert cfg.token_path.exists()

    def test_missing_client_secret_is_auth_error(self, cfg):
        with pytest.raises(AuthError, match="client secret not found"):
            GmailAuthenticator(cfg).authorize()
