"""Tests for LinodeClient"""
import pytest
import requests

import doubles
import linodyn
from doubles import ENDPOINT


@pytest.fixture
def record():
    return linodyn.TrackedRecord("www.example.com (A)", 1234, 42)


def test_update_request(requests_mock, client, record):
    """Test the update request carries the key, action, IDs, and the literal
    remote address token"""
    requests_mock.get(ENDPOINT, text=doubles.success_body(42))

    client.update("abc123", record)

    assert requests_mock.call_count == 1
    url = requests_mock.last_request.url
    assert url.startswith(ENDPOINT + "?")
    assert "api_key=abc123" in url
    assert "api_action=domain.resource.update" in url
    assert "DomainID=1234" in url
    assert "ResourceID=42" in url
    assert "Target=[remote_addr]" in url
    assert requests_mock.last_request.headers['User-Agent'].startswith(
        "linodyn/"
    )


def test_update_uses_timeout(requests_mock, record):
    """Test the configured timeout is passed to every request"""
    requests_mock.get(ENDPOINT, text=doubles.success_body(42))
    client = linodyn.LinodeClient(ENDPOINT, timeout=12.5)

    client.update("abc123", record)

    assert requests_mock.last_request.timeout == 12.5


def test_update_success(requests_mock, client, record):
    """Test a matching response is a success"""
    requests_mock.get(ENDPOINT, text=doubles.success_body(42))

    result = client.update("abc123", record)

    assert result == linodyn.UpdateResult(record, True)


def test_update_success_any_key_order_and_case(requests_mock, client, record):
    """Test the response is compared structurally, not as text"""
    requests_mock.get(ENDPOINT, text='{"ERRORARRAY":[],"DATA":{"resourceid":'
                                     '42},"Action":"domain.resource.update"}')

    result = client.update("abc123", record)

    assert result.success


def test_update_wrong_record_id(requests_mock, client):
    """Test a success response for a different record is a failure"""
    requests_mock.get(ENDPOINT, text=doubles.success_body(42))
    record = linodyn.TrackedRecord("www.example.com (A)", 1234, 7)

    result = client.update("abc123", record)

    assert not result.success
    assert "Unexpected response" in result.error_detail


@pytest.mark.parametrize('body', [
    '{"ACTION":"domain.resource.update","DATA":{"ResourceID":42}}',
    '{"ACTION":"domain.resource.list","DATA":{"ResourceID":42},'
    '"ERRORARRAY":[]}',
    '{"ACTION":"domain.resource.update","DATA":{"ResourceID":42,"X":1},'
    '"ERRORARRAY":[]}',
    '[]',
])
def test_update_unexpected_shape(requests_mock, client, record, body):
    """Test responses that are not exactly the success shape are failures"""
    requests_mock.get(ENDPOINT, text=body)

    result = client.update("abc123", record)

    assert not result.success


def test_update_provider_error(requests_mock, client, record):
    """Test the provider's error message becomes the error detail"""
    requests_mock.get(ENDPOINT, text='{"ACTION":"x","DATA":{},"ERRORARRAY":'
                                     '[{"ERRORMESSAGE":"bad token"}]}')

    result = client.update("abc123", record)

    assert result == linodyn.UpdateResult(record, False, "bad token")


def test_update_malformed_response(requests_mock, client, record):
    """Test an undecodable body is a failure with the raw body as detail"""
    requests_mock.get(ENDPOINT, text='<html>Maintenance</html>')

    result = client.update("abc123", record)

    assert result == linodyn.UpdateResult(record, False,
                                          '<html>Maintenance</html>')


def test_update_deeply_nested_response(requests_mock, client, record):
    """Test a pathologically nested body is a failure, not a crash"""
    requests_mock.get(ENDPOINT, text='[' * 5000)

    result = client.update("abc123", record)

    assert result == linodyn.UpdateResult(record, False, '[' * 5000)


def test_update_empty_response(requests_mock, client, record):
    """Test an empty body is a failure"""
    requests_mock.get(ENDPOINT, text='')

    result = client.update("abc123", record)

    assert not result.success
    assert result.error_detail


@pytest.mark.parametrize('exc', [
    requests.exceptions.ConnectTimeout,
    requests.exceptions.ReadTimeout,
    requests.exceptions.ConnectionError,
])
def test_update_transport_error(requests_mock, client, record, exc):
    """Test transport errors are returned as failures, not raised"""
    requests_mock.get(ENDPOINT, exc=exc)

    result = client.update("abc123", record)

    assert not result.success
    assert result.error_detail


@pytest.mark.parametrize('status', [403, 500, 502])
def test_update_http_error(requests_mock, client, record, status):
    """Test non-2xx statuses are failures"""
    requests_mock.get(ENDPOINT, status_code=status,
                      text=doubles.success_body(42))

    result = client.update("abc123", record)

    assert not result.success
    assert str(status) in result.error_detail


def test_update_none_credential(requests_mock, client, record):
    """Test a None API key is a programming error and is raised"""
    with pytest.raises(TypeError):
        client.update(None, record)
    assert requests_mock.call_count == 0


def test_check_credential_valid(requests_mock, client):
    """Test test.echo echoing back our data means the key is valid"""
    requests_mock.get(ENDPOINT, text='{"ACTION":"test.echo","DATA":'
                                     '{"foo":"bar"},"ERRORARRAY":[]}')

    assert client.check_credential("abc123")
    assert "api_action=test.echo" in requests_mock.last_request.url
    assert "foo=bar" in requests_mock.last_request.url


def test_check_credential_invalid(requests_mock, client):
    """Test an authentication error means the key is invalid"""
    requests_mock.get(ENDPOINT, text=doubles.error_body(
        "Authentication failed", "test.echo"
    ))

    assert not client.check_credential("abc123")


def test_check_credential_transport_error(requests_mock, client):
    """Test transport errors are raised from check_credential"""
    requests_mock.get(ENDPOINT, exc=requests.exceptions.ConnectionError)

    with pytest.raises(linodyn.TransportError):
        client.check_credential("abc123")


DOMAIN_LIST = ('{"ERRORARRAY":[],"ACTION":"domain.list","DATA":['
               '{"DOMAINID":5093,"DOMAIN":"zzz.org","TYPE":"master",'
               '"SOA_EMAIL":"a@zzz.org","TTL_SEC":0},'
               '{"DOMAINID":5125,"DOMAIN":"example.com","TYPE":"Master"},'
               '{"DOMAINID":5126,"DOMAIN":"slave.net","TYPE":"slave",'
               '"MASTER_IPS":"1.2.3.4;5.6.7.8"},'
               '{"DOMAINID":9999,"DOMAIN":"example.com","TYPE":"master"}]}')


def test_list_zones(requests_mock, client):
    """Test only master zones are listed, sorted and without duplicates"""
    requests_mock.get(ENDPOINT, text=DOMAIN_LIST)

    zones = client.list_zones("abc123")

    assert zones == [
        linodyn.Zone(5125, "example.com"),
        linodyn.Zone(5093, "zzz.org"),
    ]
    assert "api_action=domain.list" in requests_mock.last_request.url


def test_list_zones_error(requests_mock, client):
    """Test a provider error is raised from list_zones"""
    requests_mock.get(ENDPOINT, text=doubles.error_body("bad key",
                                                        "domain.list"))

    with pytest.raises(linodyn.ProviderReportedError, match="bad key"):
        client.list_zones("abc123")


def test_list_zones_bad_structure(requests_mock, client):
    """Test DATA that is not a list of zones is a MalformedResponse"""
    requests_mock.get(ENDPOINT, text='{"ACTION":"domain.list","DATA":'
                                     '[{"DOMAIN":"a.com"}],"ERRORARRAY":[]}')

    with pytest.raises(linodyn.MalformedResponse):
        client.list_zones("abc123")


RESOURCE_LIST = ('{"ERRORARRAY":[],"ACTION":"domain.resource.list","DATA":['
                 '{"RESOURCEID":28537,"NAME":"www","TYPE":"A",'
                 '"TARGET":"1.2.3.4","DOMAINID":5125},'
                 '{"RESOURCEID":28536,"NAME":"","TYPE":"a",'
                 '"TARGET":"1.2.3.4","DOMAINID":5125},'
                 '{"RESOURCEID":28538,"NAME":"www","TYPE":"AAAA",'
                 '"TARGET":"2001:db8::1","DOMAINID":5125},'
                 '{"RESOURCEID":28539,"NAME":"","TYPE":"MX",'
                 '"TARGET":"mail.example.com","DOMAINID":5125}]}')


def test_list_records(requests_mock, client):
    """Test A and AAAA records are listed with full display names"""
    requests_mock.get(ENDPOINT, text=RESOURCE_LIST)

    records = client.list_records("abc123", linodyn.Zone(5125, "example.com"))

    assert records == [
        linodyn.TrackedRecord("example.com (A)", 5125, 28536),
        linodyn.TrackedRecord("www.example.com (A)", 5125, 28537),
        linodyn.TrackedRecord("www.example.com (AAAA)", 5125, 28538),
    ]
    url = requests_mock.last_request.url
    assert "api_action=domain.resource.list" in url
    assert "DomainID=5125" in url
