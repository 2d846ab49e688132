import unittest

from onvifproto import faults, parser, shapes
from onvifproto.errors import FaultKind, ProtocolFault
from tests.const import (
    BARE_FAULT, DEVICE_INFORMATION_RESPONSE, NOT_AUTHORIZED_FAULT, REASON_ONLY_FAULT,
    SOAP11_FAULT, STREAM_URI_RESPONSE, USERNAME_CLASH_FAULT, USERS_RESPONSE)


def _fault_body(detail):
    return ("<env:Envelope xmlns:env=\"http://www.w3.org/2003/05/soap-envelope\"><env:Body>"
            "<env:Fault>%s</env:Fault></env:Body></env:Envelope>" % detail).encode("utf-8")


class TestClassify(unittest.TestCase):
    def test_no_fault(self):
        self.assertIsNone(faults.classify(USERS_RESPONSE))
        self.assertIsNone(faults.classify(b""))
        self.assertIsNone(faults.classify(b"not xml at all"))

    def test_fault_returned_not_raised(self):
        fault = faults.classify(NOT_AUTHORIZED_FAULT)
        self.assertIsInstance(fault, ProtocolFault)

    def test_not_authorized_subcode(self):
        fault = faults.classify(NOT_AUTHORIZED_FAULT)
        self.assertEqual(fault.kind, FaultKind.NOT_AUTHORIZED)
        self.assertEqual(fault.message, "not authorized")
        self.assertEqual(fault.code, "ter:NotAuthorized")
        self.assertEqual(fault.body, NOT_AUTHORIZED_FAULT)

    def test_reason_text_when_no_known_code(self):
        """
        A fault with only a SOAP 1.2 reason should carry that reason.
        """
        fault = faults.classify(REASON_ONLY_FAULT)
        self.assertEqual(fault.kind, FaultKind.UNCLASSIFIED)
        self.assertEqual(fault.message, "Sender not authorized")
        self.assertEqual(fault.code, "SOAP-ENV:Sender")

    def test_username_clash_nested_subcode(self):
        fault = faults.classify(USERNAME_CLASH_FAULT)
        self.assertEqual(fault.kind, FaultKind.USERNAME_CLASH)
        self.assertEqual(fault.code, "ter:UsernameClash")

    def test_single_subcode_level(self):
        body = _fault_body("<env:Code><env:Value>env:Receiver</env:Value>"
                           "<env:Subcode><env:Value>ter:ActionNotSupported</env:Value></env:Subcode>"
                           "</env:Code>")
        self.assertEqual(faults.classify(body).code, "ter:ActionNotSupported")

    def test_cdata_reason(self):
        body = _fault_body("<env:Reason><env:Text><![CDATA[Bad <Profile> & token]]></env:Text></env:Reason>")
        self.assertEqual(faults.classify(body).message, "Bad <Profile> & token")

    def test_table(self):
        for needle, kind in (
                ("ter:UsernameClash", FaultKind.USERNAME_CLASH),
                ("ter:UsernameMissing", FaultKind.USERNAME_MISSING),
                ("ter:TooManyUsers", FaultKind.TOO_MANY_USERS),
                ("ter:FixedUser", FaultKind.FIXED_USER),
                ("ter:PasswordTooWeak", FaultKind.PASSWORD_POLICY),
                ("ter:NotAuthorized", FaultKind.NOT_AUTHORIZED)):
            body = _fault_body("<env:Code><env:Value>%s</env:Value></env:Code>" % needle)
            self.assertEqual(faults.classify(body).kind, kind, needle)

    def test_first_match_wins(self):
        body = _fault_body("<env:Value>ter:NotAuthorized</env:Value>"
                           "<env:Value>ter:UsernameMissing</env:Value>")
        self.assertEqual(faults.classify(body).kind, FaultKind.USERNAME_MISSING)

    def test_soap11_faultstring(self):
        fault = faults.classify(SOAP11_FAULT)
        self.assertEqual(fault.kind, FaultKind.UNCLASSIFIED)
        self.assertEqual(fault.message, "Action not supported")
        self.assertEqual(fault.code, "s:Client")

    def test_fault_without_detail(self):
        fault = faults.classify(BARE_FAULT)
        self.assertEqual(fault.kind, FaultKind.UNCLASSIFIED)
        self.assertEqual(fault.message, faults.GENERIC_FAULT_MESSAGE)
        self.assertTrue(fault.body)

    def test_unprefixed_fault(self):
        body = b"<Envelope><Body><Fault><faultstring>oops &amp; more</faultstring></Fault></Body></Envelope>"
        self.assertEqual(faults.classify(body).message, "oops & more")

    def test_str_input(self):
        fault = faults.classify(NOT_AUTHORIZED_FAULT.decode("utf-8"))
        self.assertEqual(fault.kind, FaultKind.NOT_AUTHORIZED)


class TestDisjoint(unittest.TestCase):
    """
    A body is either a fault or decodable, never both.
    """

    BODIES = (
        (USERS_RESPONSE, shapes.USERS),
        (STREAM_URI_RESPONSE, shapes.STREAM_URI),
        (DEVICE_INFORMATION_RESPONSE, shapes.DEVICE_INFORMATION),
        (NOT_AUTHORIZED_FAULT, shapes.DEVICE_INFORMATION),
        (REASON_ONLY_FAULT, shapes.STREAM_URI),
        (SOAP11_FAULT, shapes.USERS),
        (BARE_FAULT, shapes.USERS),
    )

    def test_disjoint(self):
        for body, shape in self.BODIES:
            fault = faults.classify(body)
            try:
                parser.parse(body, shape)
                decoded = True
            except ProtocolFault:
                decoded = False
            self.assertNotEqual(fault is None, not decoded)
            self.assertFalse(fault is not None and decoded)
