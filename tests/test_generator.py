from dataclasses import replace
from datetime import date

import pytest
from lxml import etree

from xbrl_survey import Submission, to_xbrl
from xbrl_survey.errors import GeneratorError
from xbrl_survey.generator import Generator, schema_filename

NS = {
    "xbrli": "http://www.xbrl.org/2003/instance",
    "link": "http://www.xbrl.org/2003/linkbase",
    "xlink": "http://www.w3.org/1999/xlink",
    "xbrldi": "http://xbrl.org/2006/xbrldi",
    "xsi": "http://www.w3.org/2001/XMLSchema-instance",
    "strix": "https://test.example.com/dcm/DTS/test_survey_2025",
}
NIL = f"{{{NS['xsi']}}}nil"


def parse(xml: str):
    return etree.fromstring(xml.encode("utf-8"))


def facts(doc, wire_id):
    return doc.findall(f"strix:{wire_id}", NS)


class TestDocumentSkeleton:
    def test_root_namespaces_and_schema_ref(self, submission):
        doc = parse(to_xbrl(submission))
        assert doc.tag == f"{{{NS['xbrli']}}}xbrl"
        assert doc.nsmap["strix"] == NS["strix"]
        assert doc.nsmap["xbrldi"] == NS["xbrldi"]
        refs = doc.findall("link:schemaRef", NS)
        assert len(refs) == 1
        assert refs[0].get(f"{{{NS['xlink']}}}href") == "http://example.com/test/taxonomy.xsd"
        assert refs[0].get(f"{{{NS['xlink']}}}type") == "simple"

    def test_base_context_and_units_without_answers(self, submission):
        doc = parse(to_xbrl(submission))
        contexts = doc.findall("xbrli:context", NS)
        assert [c.get("id") for c in contexts] == ["ctx_ENTITY_001_20251231"]
        identifier = contexts[0].find("xbrli:entity/xbrli:identifier", NS)
        assert identifier.text == "ENTITY_001"
        assert identifier.get("scheme") == "https://amlcft.amsf.mc"
        assert contexts[0].find("xbrli:period/xbrli:instant", NS).text == "2025-12-31"
        units = {u.get("id"): u.find("xbrli:measure", NS).text for u in doc.findall("xbrli:unit", NS)}
        assert units == {"pure": "xbrli:pure", "EUR": "iso4217:EUR"}

    def test_xml_declaration_and_pretty_print(self, submission):
        compact = to_xbrl(submission)
        pretty = to_xbrl(submission, pretty=True)
        assert compact.startswith("<?xml")
        assert "UTF-8" in compact.splitlines()[0]
        assert pretty.count("\n") > compact.count("\n")

    def test_schema_ref_derived_from_namespace(self, questionnaire):
        bare = replace(questionnaire, schema_url=None)
        submission = Submission("test_industry", 2025, "E", date(2025, 12, 31), questionnaire=bare)
        doc = parse(to_xbrl(submission))
        href = doc.find("link:schemaRef", NS).get(f"{{{NS['xlink']}}}href")
        assert href == "test_survey_2025.xsd"


class TestFacts:
    def test_boolean_fact_has_literal_and_no_decimals(self, submission):
        submission["tGATE"] = "Oui"
        doc = parse(to_xbrl(submission))
        (gate,) = facts(doc, "tGATE")
        assert gate.text == "Oui"
        assert gate.get("decimals") is None
        assert gate.get("unitRef") is None
        assert gate.get("contextRef") == "ctx_ENTITY_001_20251231"

    def test_numeric_attributes_and_formatting(self, submission):
        submission.update({"tGATE": "Oui", "t001": "42", "t003": "1234.5", "t006": 7})
        doc = parse(to_xbrl(submission))
        (count,) = facts(doc, "t001")
        assert (count.text, count.get("decimals"), count.get("unitRef")) == ("42", "0", "pure")
        (amount,) = facts(doc, "t003")
        assert (amount.text, amount.get("decimals"), amount.get("unitRef")) == ("1234.50", "2", "EUR")
        (value,) = facts(doc, "t006")
        assert (value.text, value.get("decimals")) == ("7.00", "2")

    def test_dates_render_iso(self, submission):
        submission["t008"] = "2025-06-30"
        (fact,) = facts(parse(to_xbrl(submission)), "t008")
        assert fact.text == "2025-06-30"

    def test_unanswered_visible_field_is_nil(self, submission):
        submission["tGATE"] = "Oui"
        (count,) = facts(parse(to_xbrl(submission)), "t001")
        assert count.get(NIL) == "true"
        assert count.get("decimals") is None

    def test_omitting_empty_facts(self, submission):
        submission["tGATE"] = "Oui"
        doc = parse(to_xbrl(submission, include_empty=False))
        assert facts(doc, "t001") == []
        assert len(facts(doc, "tGATE")) == 1

    def test_hidden_fields_are_not_written(self, submission):
        submission["tGATE"] = "Non"
        submission["t001"] = 5
        doc = parse(to_xbrl(submission))
        assert facts(doc, "t001") == []
        assert facts(doc, "t003") == []

    def test_special_characters_are_escaped(self, submission):
        submission["t002"] = 'A & B <"quoted">'
        xml = to_xbrl(submission)
        assert "A &amp; B &lt;" in xml
        (fact,) = facts(parse(xml), "t002")
        assert fact.text == 'A & B <"quoted">'

    def test_facts_follow_questionnaire_order(self, submission):
        submission.update({"t002": "x", "tGATE": "Oui", "t001": 1})
        doc = parse(to_xbrl(submission, include_empty=False))
        names = [etree.QName(el).localname for el in doc if etree.QName(el).namespace == NS["strix"]]
        assert names == ["tGATE", "t001", "t002"]


class TestDimensionalFacts:
    def test_one_fact_and_context_per_category(self, submission):
        submission["t005"] = {"FR": "40", "DE": "12.5"}
        submission["t002"] = "base"
        doc = parse(to_xbrl(submission))
        dimensional = facts(doc, "t005")
        assert len(dimensional) == 2
        refs = {f.get("contextRef") for f in dimensional}
        assert refs == {"ctx_ENTITY_001_20251231_FR", "ctx_ENTITY_001_20251231_DE"}
        assert [f.text for f in dimensional] == ["40.00", "12.50"]

        contexts = {c.get("id"): c for c in doc.findall("xbrli:context", NS)}
        assert "ctx_ENTITY_001_20251231" in contexts
        member = contexts["ctx_ENTITY_001_20251231_FR"].find(
            "xbrli:entity/xbrli:segment/xbrldi:explicitMember", NS)
        assert member.get("dimension") == "strix:CountryDimension"
        assert member.text == "strix:sdlFR"
        (base_fact,) = facts(doc, "t002")
        assert base_fact.get("contextRef") == "ctx_ENTITY_001_20251231"

    def test_context_ids_replace_characters_outside_ncname(self, questionnaire):
        submission = Submission("test_industry", 2025, "ACME / 7", date(2025, 12, 31),
                                questionnaire=questionnaire)
        submission["t005"] = {"f r/1": "40"}
        doc = parse(to_xbrl(submission))
        ids = [c.get("id") for c in doc.findall("xbrli:context", NS)]
        assert ids == ["ctx_ACME___7_20251231", "ctx_ACME___7_20251231_F_R_1"]
        identifier = doc.find("xbrli:context/xbrli:entity/xbrli:identifier", NS)
        assert identifier.text == "ACME / 7"

    def test_contexts_precede_units(self, submission):
        submission["t005"] = {"FR": "40"}
        doc = parse(to_xbrl(submission))
        tags = [etree.QName(el).localname for el in doc]
        assert tags[:5] == ["schemaRef", "context", "context", "unit", "unit"]

    def test_unanswered_dimensional_field_writes_nothing(self, submission):
        doc = parse(to_xbrl(submission))
        assert facts(doc, "t005") == []
        assert len(doc.findall("xbrli:context", NS)) == 1

    def test_scalar_on_dimensional_field_raises(self, submission):
        submission["t005"] = "40"
        with pytest.raises(GeneratorError):
            to_xbrl(submission)


class TestGeneratorErrors:
    def test_missing_submission(self):
        with pytest.raises(GeneratorError):
            Generator(None).generate()

    def test_period_must_be_a_date(self, questionnaire):
        submission = Submission("test_industry", 2025, "E", "2025-12-31", questionnaire=questionnaire)
        with pytest.raises(GeneratorError, match="date"):
            to_xbrl(submission)

    def test_unresolved_questionnaire(self, registry):
        submission = Submission("unknown", 2025, "E", date(2025, 12, 31), registry=registry)
        with pytest.raises(GeneratorError, match="resolved"):
            to_xbrl(submission)


@pytest.mark.parametrize("namespace, expected", [
    ("https://amlcft.amsf.mc/dcm/DTS/strix_survey_2025", "strix_survey_2025.xsd"),
    ("https://example.com/path/", "path.xsd"),
    ("https://example.com/", "taxonomy.xsd"),
    ("", "taxonomy.xsd"),
    (None, "taxonomy.xsd"),
])
def test_schema_filename(namespace, expected):
    assert schema_filename(namespace) == expected
