from crchost import version


def test_crc_version_is_unset_default():
    assert version.get_crc_version() == "0.0.0-unset"


def test_commit_sha_is_unset_default():
    assert version.get_commit_sha() == "sha-unset"


def test_bundle_version_is_unset_default():
    assert version.get_bundle_version() == "0.0.0-unset"