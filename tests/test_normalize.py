from hifz_tutor.normalize import normalize_to_ordered_strings, to_text


def test_list_of_strings():
    assert normalize_to_ordered_strings(["a", "b"]) == ["a", "b"]


def test_numeric_keyed_map_sorted_numerically():
    assert normalize_to_ordered_strings({"10": "j", "2": "b", "1": "a"}) == ["a", "b", "j"]


def test_container_keys_unwrapped():
    assert normalize_to_ordered_strings({"ayahs": {"2": "b", "1": "a"}}) == ["a", "b"]
    assert normalize_to_ordered_strings([{"ayahs": {"1": "a"}}]) == ["a"]
    assert normalize_to_ordered_strings({"name": "X", "verses": ["a", "b"]}) == ["a", "b"]


def test_object_values_extracted():
    raw = [{"text": "first"}, {"translation": {"en": "second"}}, ["third", "part"]]
    assert normalize_to_ordered_strings(raw) == ["first", "second", "third part"]


def test_multiline_string():
    assert normalize_to_ordered_strings("a\n\n b \n") == ["a", "b"]


def test_malformed_shapes_give_empty():
    assert normalize_to_ordered_strings(None) == []
    assert normalize_to_ordered_strings(42) == []
    assert normalize_to_ordered_strings({"title": "no verses"}) == []


def test_to_text_falls_back_to_empty():
    assert to_text(7) == ""
    assert to_text(None) == ""
    assert to_text({"other": {"deep": "found"}}) == "found"
