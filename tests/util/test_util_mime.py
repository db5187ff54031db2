import unittest

from teamstore.util.mime import (
    DEFAULT_MIME,
    decode_data_url,
    encode_data_url,
    guess_file_type,
)


class TestUtilMime(unittest.TestCase):
    def test_guess_file_type(self) -> None:
        self.assertEqual(guess_file_type("notes.txt"), "text/plain")
        self.assertEqual(guess_file_type("blob.unknownext"), DEFAULT_MIME)

    def test_encode_data_url(self) -> None:
        self.assertEqual(encode_data_url(b"hi", "text/plain"), "data:text/plain;base64,aGk=")

    def test_decode_data_url(self) -> None:
        self.assertEqual(decode_data_url("data:text/plain;base64,aGk="), b"hi")

    def test_decode_plain_text(self) -> None:
        self.assertEqual(decode_data_url("just text"), b"just text")

    def test_decode_rejects_bad_base64(self) -> None:
        with self.assertRaises(ValueError):
            decode_data_url("data:text/plain;base64,@@@")
