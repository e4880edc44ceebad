CROP_INFO_SYSTEM_PROMPT = """
You are an expert agricultural botanist. Provide concise, factual information about the requested crop in a structured JSON format.
"""

CROP_INFO_PROMPT = (
    "Provide a detailed profile for the crop: {crop_name}. Include a general description, "
    "ideal growing conditions (soil types, temperature range, annual rainfall), common pests "
    "and diseases, and the typical growing cycle duration."
)
