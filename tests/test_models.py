from priorart.models import CandidateRecord, QAPair, QueryContext, SearchRequest


def test_query_context_concatenates_parts():
    context = QueryContext.build(
        title="Pool cover",
        description="  Retractable slats ",
        questions=[QAPair(question="Material?", answer="Polycarbonate"), QAPair(question="Color?", answer="  ")],
    )
    assert context.text == "Pool cover Retractable slats Material? Polycarbonate"
    assert not context.is_empty


def test_query_context_empty():
    assert QueryContext.build().is_empty
    assert QueryContext.build(query="   ", questions=[QAPair(question="Why?")]).is_empty


def test_search_request_accepts_aliases_and_field_names():
    by_alias = SearchRequest.model_validate({"sessionId": "s", "ideaTitle": "T", "ideaDescription": "D"})
    by_name = SearchRequest.model_validate({"session_id": "s", "idea_title": "T", "idea_description": "D"})
    assert by_alias == by_name
    assert by_alias.to_context().text == "T D"


def test_candidate_text_and_dedupe_key():
    c = CandidateRecord(title="Heat Pump", publication_number=" US123B2 ", summary="Efficient")
    assert c.text == "Heat Pump Efficient"
    assert c.dedupe_key == "us123b2"
    assert CandidateRecord(title="Heat Pump", publication_number="", summary="").dedupe_key == "heat pump"


def test_candidate_to_dict_fields():
    row = CandidateRecord(title="T", publication_number="US1", summary="S", source="USPTO").to_dict()
    assert set(row) >= {
        "title", "publication_number", "summary", "url", "source", "patent_date", "assignee",
        "similarity_score", "semantic_score", "keyword_score",
    }
