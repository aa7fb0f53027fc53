from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Directory or http(s) base URL holding the reference CSVs
    reference_data_location: str = "data"

    master_table_file: str = "master.csv"
    nutrition_table_file: str = "table_nutrition.csv"
    cognitive_table_file: str = "table_cognitive_benefits.csv"
    diet_table_file: str = "table_diet_compatibility.csv"
    microbiome_table_file: str = "table_microbiome.csv"

    # Tried in order; first one that decodes wins
    csv_encodings: list[str] = ["utf-8", "latin-1"]

    # Column-name priority lists (matched case-insensitively)
    key_columns: list[str] = ["ingredient_name", "ingredient", "food", "item", "name"]
    alias_columns: list[str] = ["aliases", "alias", "also_known_as"]

    # Empty ingredient list: True renders every row, False renders a note only
    render_when_no_ingredients: bool = True

    # Load reference tables during app startup
    preload_reference_data: bool = True

    log_level: str = "INFO"

    class Config:
        env_file = ".env"

    def table_files(self) -> dict[str, str]:
        """Map reference resource names to their CSV file names."""
        return {
            "master": self.master_table_file,
            "nutrition": self.nutrition_table_file,
            "cognitive": self.cognitive_table_file,
            "diet": self.diet_table_file,
            "microbiome": self.microbiome_table_file,
        }


settings = Settings()
