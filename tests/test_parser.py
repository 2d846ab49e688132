import unittest

from onvifproto import parser, shapes
from onvifproto.errors import DecodeError, FaultKind, ProtocolFault, TransportError
from onvifproto.interfaces import RawResponse
from onvifproto.parser import Field, ResponseShape
from tests.const import (
    BROKEN_USERS_RESPONSE, CDATA_STREAM_URI_RESPONSE, DEVICE_INFORMATION_RESPONSE,
    EMPTY_USERS_RESPONSE, DRIFTED_STREAM_URI_RESPONSE, HOSTNAME_RESPONSE, NOT_AUTHORIZED_FAULT, OSDS_RESPONSE,
    PROFILES_RESPONSE, STREAM_URI_RESPONSE, USERS_RESPONSE)


class TestStructuredPhase(unittest.TestCase):
    def test_users(self):
        users = parser.parse_structured(USERS_RESPONSE, shapes.USERS)
        self.assertEqual(users, [
            {"username": "admin", "user_level": "Administrator"},
            {"username": "viewer", "user_level": "User"},
        ])

    def test_not_well_formed(self):
        self.assertIsNone(parser.parse_structured(BROKEN_USERS_RESPONSE, shapes.USERS))

    def test_wrong_response_element(self):
        self.assertIsNone(parser.parse_structured(USERS_RESPONSE, shapes.STREAM_URI))

    def test_missing_field_left_empty(self):
        result = parser.parse_structured(DRIFTED_STREAM_URI_RESPONSE, shapes.STREAM_URI)
        self.assertEqual(result, {"uri": None})

    def test_attributes_and_conversion(self):
        profiles = parser.parse_structured(PROFILES_RESPONSE, shapes.PROFILES)
        self.assertEqual(profiles[0]["token"], "Profile_1")
        self.assertEqual(profiles[0]["encoder_token"], "VideoEncoder_1")
        self.assertEqual(profiles[0]["width"], 1920)
        self.assertEqual(profiles[0]["bitrate_limit"], 4096)
        self.assertEqual(profiles[1], {
            "token": "Profile_2", "name": "subStream", "encoder_token": None, "encoding": None,
            "width": None, "height": None, "frame_rate_limit": None, "bitrate_limit": None,
        })


class TestFallbackPhase(unittest.TestCase):
    def test_users_from_broken_xml(self):
        """
        Records without a username should be skipped.
        """
        users = parser.parse_fallback(BROKEN_USERS_RESPONSE, shapes.USERS)
        self.assertEqual(users, [
            {"username": "admin", "user_level": "Administrator"},
            {"username": "operator", "user_level": "Operator"},
        ])

    def test_alternative_spelling(self):
        result = parser.parse_fallback(DRIFTED_STREAM_URI_RESPONSE, shapes.STREAM_URI)
        self.assertEqual(result, {"uri": "rtsp://10.0.0.5/live/main"})

    def test_unescapes_values(self):
        result = parser.parse_fallback(STREAM_URI_RESPONSE, shapes.STREAM_URI)
        self.assertTrue(result["uri"].endswith("transportmode=unicast&profile=Profile_1"))

    def test_cdata_value(self):
        """
        A CDATA section yields its literal content, without the markup and
        without entity decoding.
        """
        self.assertIsNone(parser.parse_structured(CDATA_STREAM_URI_RESPONSE, shapes.STREAM_URI))
        result = parser.parse_fallback(CDATA_STREAM_URI_RESPONSE, shapes.STREAM_URI)
        self.assertEqual(result, {"uri": "rtsp://10.0.0.5/a?x=1&y=2"})

    def test_keeps_partial_values(self):
        result = parser.parse_fallback(b"<x/>", shapes.DEVICE_INFORMATION,
                                       {"manufacturer": "Acme", "model": None})
        self.assertEqual(result["manufacturer"], "Acme")
        self.assertIsNone(result["model"])

    def test_record_attributes(self):
        osds = parser.parse_fallback(OSDS_RESPONSE, shapes.OSDS)
        self.assertEqual([o["token"] for o in osds], ["OSD_Text_1", "OSD_Date_1"])
        self.assertEqual(osds[1]["type"], "DateAndTime")

    def test_list_without_response_element(self):
        self.assertIsNone(parser.parse_fallback(STREAM_URI_RESPONSE, shapes.USERS))


class TestParse(unittest.TestCase):
    def test_structured_success(self):
        info = parser.parse(DEVICE_INFORMATION_RESPONSE, shapes.DEVICE_INFORMATION)
        self.assertEqual(info, {
            "manufacturer": "Acme",
            "model": "IPC-2000",
            "firmware_version": "V5.4.0",
            "serial_number": "SN0001",
            "hardware_id": "1.0",
        })

    def test_stream_uri_entity_decoded_by_parser(self):
        result = parser.parse(STREAM_URI_RESPONSE, shapes.STREAM_URI)
        self.assertEqual(
            result["uri"],
            "rtsp://10.0.0.5:554/Streaming/Channels/101?transportmode=unicast&profile=Profile_1")

    def test_falls_back_on_empty_required_field(self):
        result = parser.parse(DRIFTED_STREAM_URI_RESPONSE, shapes.STREAM_URI)
        self.assertEqual(result["uri"], "rtsp://10.0.0.5/live/main")

    def test_falls_back_on_broken_xml(self):
        users = parser.parse(BROKEN_USERS_RESPONSE, shapes.USERS)
        self.assertEqual([u["username"] for u in users], ["admin", "operator"])

    def test_zero_records_is_empty_list(self):
        """
        A GetUsers response with no User elements is valid, not a decode failure.
        """
        self.assertEqual(parser.parse(EMPTY_USERS_RESPONSE, shapes.USERS), [])

    def test_cdata_uri(self):
        result = parser.parse(CDATA_STREAM_URI_RESPONSE, shapes.STREAM_URI)
        self.assertEqual(result["uri"], "rtsp://10.0.0.5/a?x=1&y=2")

    def test_hostname_bool(self):
        result = parser.parse(HOSTNAME_RESPONSE, shapes.HOSTNAME)
        self.assertEqual(result, {"name": "frontdoor", "from_dhcp": True})

    def test_fault_raised_before_decoding(self):
        with self.assertRaises(ProtocolFault) as ctx:
            parser.parse(RawResponse(400, NOT_AUTHORIZED_FAULT), shapes.STREAM_URI)
        self.assertEqual(ctx.exception.kind, FaultKind.NOT_AUTHORIZED)

    def test_error_status_without_fault(self):
        with self.assertRaises(TransportError) as ctx:
            parser.parse(RawResponse(401, b"<html>Unauthorized</html>"), shapes.STREAM_URI)
        self.assertEqual(ctx.exception.status, 401)
        self.assertEqual(ctx.exception.body, b"<html>Unauthorized</html>")

    def test_required_field_not_found(self):
        with self.assertRaises(DecodeError) as ctx:
            parser.parse(USERS_RESPONSE, shapes.STREAM_URI)
        self.assertEqual(ctx.exception.shape, "GetStreamUri")
        self.assertEqual(ctx.exception.field, "uri")

    def test_list_response_not_found(self):
        with self.assertRaises(DecodeError):
            parser.parse(b"<garbage", shapes.USERS)

    def test_error_classes_are_disjoint(self):
        for a, b in ((DecodeError, ProtocolFault), (DecodeError, TransportError),
                     (ProtocolFault, TransportError)):
            self.assertFalse(issubclass(a, b) or issubclass(b, a))

    def test_unconvertible_value_is_missing(self):
        shape = ResponseShape(
            name="Test", response="TestResponse",
            fields=(Field("count", ("Count",), required=True, convert=int),))
        with self.assertRaises(DecodeError):
            parser.parse(b"<TestResponse><Count>many</Count></TestResponse>", shape)

    def test_bare_response_root(self):
        shape = ResponseShape(
            name="Test", response="TestResponse", fields=(Field("count", ("Count",), convert=int),))
        self.assertEqual(parser.parse("<TestResponse><Count>3</Count></TestResponse>", shape),
                         {"count": 3})
