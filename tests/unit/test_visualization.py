from __future__ import annotations

import pytest

from askdata.models import QueryResult
from askdata.prompts import PromptResources
from askdata.visualization import VisualizationAdvisor


def make_advisor(llm) -> VisualizationAdvisor:
    return VisualizationAdvisor(llm, PromptResources())


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "data_text, reasoning",
    [
        ("not json", "Failed to parse data."),
        ('{"columns": [], "rows": []}', "Data is empty or not in the expected format."),
        ('{"columns": ["a"]}', "Data is empty or not in the expected format."),
        ("[1, 2, 3]", "Data is empty or not in the expected format."),
    ],
)
async def test_degenerate_data_skips_model(scripted_llm, data_text: str, reasoning: str) -> None:
    llm = scripted_llm()
    advice = await make_advisor(llm).advise("Which product?", data_text)

    assert advice.is_visualizable is False
    assert advice.chart_type == "none"
    assert advice.chart_title == ""
    assert advice.reasoning == reasoning
    assert llm.prompts == []


@pytest.mark.asyncio
async def test_model_advice_is_returned(scripted_llm, cpc_result: QueryResult) -> None:
    llm = scripted_llm({
        "isVisualizable": True,
        "chartType": "bar",
        "chartTitle": "CPC by product",
        "reasoning": "Comparing products",
    })

    advice = await make_advisor(llm).advise("Which product had the highest CPC?", cpc_result.to_prompt_text())

    assert advice.is_visualizable is True
    assert advice.chart_type == "bar"
    assert advice.chart_title == "CPC by product"
    assert "product_name" in llm.prompts[0]["messages"][-1]["content"]


@pytest.mark.asyncio
async def test_visualizable_without_chart_type_is_downgraded(scripted_llm, cpc_result: QueryResult) -> None:
    llm = scripted_llm({"isVisualizable": True, "chartType": "none", "chartTitle": "", "reasoning": "?"})

    advice = await make_advisor(llm).advise("q", cpc_result.to_prompt_text())

    assert advice.is_visualizable is False
    assert advice.chart_type == "none"


@pytest.mark.asyncio
async def test_not_visualizable_forces_none_chart(scripted_llm, cpc_result: QueryResult) -> None:
    llm = scripted_llm({"isVisualizable": False, "chartType": "pie", "chartTitle": "x", "reasoning": "single value"})

    advice = await make_advisor(llm).advise("q", cpc_result.to_prompt_text())

    assert advice.chart_type == "none"


@pytest.mark.asyncio
async def test_invalid_chart_type_raises(scripted_llm, cpc_result: QueryResult) -> None:
    llm = scripted_llm({"isVisualizable": True, "chartType": "scatter"})

    with pytest.raises(ValueError):
        await make_advisor(llm).advise("q", cpc_result.to_prompt_text())
