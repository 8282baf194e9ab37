# DocForge composition engine: placeholders, composer, customization, styling
