"""Country legal frameworks and document-type add-ons used for document correction."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LegalFramework:
    governing_law: str
    arbitration: str
    data_protection: str
    signature_requirements: str
    specific_laws: tuple[str, ...]
    esg_framework: str
    tax_id: str
    currency: str


LEGAL_FRAMEWORKS: dict[str, LegalFramework] = {
    "brazil": LegalFramework(
        governing_law="Lei Brasileira, Código Civil (Lei 10.406/2002), Código Comercial",
        arbitration="Lei de Arbitragem (Lei 9.307/1996), Câmara de Arbitragem do Brasil",
        data_protection="LGPD (Lei 13.709/2018), Marco Civil da Internet (Lei 12.965/2014)",
        signature_requirements="Lei 14.063/2020 (assinatura eletrônica), ICP-Brasil para assinatura qualificada",
        specific_laws=(
            "Lei 10.406/2002 - Código Civil Brasileiro",
            "Lei 13.709/2018 - Lei Geral de Proteção de Dados (LGPD)",
            "Lei 12.846/2013 - Lei Anticorrupção",
            "Lei 12.305/2010 - Política Nacional de Resíduos Sólidos (PNRS)",
            "Lei 6.938/1981 - Política Nacional do Meio Ambiente",
            "Lei 9.279/1996 - Lei de Propriedade Industrial",
            "Lei 8.078/1990 - Código de Defesa do Consumidor",
            "Lei 13.874/2019 - Lei da Liberdade Econômica",
            "Decreto 7.404/2010 - Regulamenta a PNRS",
            "Lei 9.605/1998 - Lei de Crimes Ambientais",
            "Lei 12.187/2009 - Política Nacional sobre Mudança do Clima",
        ),
        esg_framework="Resolução CVM 59/2021, Taxonomia Verde Brasileira, Protocolo GEE Brasil",
        tax_id="CNPJ",
        currency="BRL",
    ),
    "italy": LegalFramework(
        governing_law="Codice Civile Italiano, Diritto Commerciale Italiano",
        arbitration="Camera Arbitrale di Milano, Codice di Procedura Civile",
        data_protection="GDPR (Regolamento UE 2016/679), Codice Privacy (D.Lgs 196/2003)",
        signature_requirements="eIDAS Regulation, Firma Digitale Qualificata",
        specific_laws=(
            "Codice Civile Italiano (R.D. 262/1942)",
            "GDPR - Regolamento UE 2016/679",
            "D.Lgs. 196/2003 - Codice della Privacy",
            "D.Lgs. 231/2001 - Responsabilità Amministrativa degli Enti",
            "D.Lgs. 152/2006 - Codice dell'Ambiente",
            "D.Lgs. 30/2005 - Codice della Proprietà Industriale",
            "D.Lgs. 206/2005 - Codice del Consumo",
            "Legge 190/2012 - Anticorruzione",
            "D.Lgs. 254/2016 - Reporting Non Finanziario",
            "Legge 221/2015 - Green Economy",
        ),
        esg_framework="EU Taxonomy, SFDR, CSRD, EU Green Deal",
        tax_id="Partita IVA",
        currency="EUR",
    ),
    "germany": LegalFramework(
        governing_law="Bürgerliches Gesetzbuch (BGB), Handelsgesetzbuch (HGB)",
        arbitration="Deutsche Institution für Schiedsgerichtsbarkeit (DIS)",
        data_protection="GDPR, Bundesdatenschutzgesetz (BDSG)",
        signature_requirements="eIDAS Regulation, Qualifizierte Elektronische Signatur",
        specific_laws=(
            "Bürgerliches Gesetzbuch (BGB)",
            "Handelsgesetzbuch (HGB)",
            "EU-DSGVO (Datenschutz-Grundverordnung)",
            "BDSG - Bundesdatenschutzgesetz",
            "UWG - Gesetz gegen den unlauteren Wettbewerb",
            "PatG - Patentgesetz",
            "GWB - Gesetz gegen Wettbewerbsbeschränkungen",
            "Kreislaufwirtschaftsgesetz (KrWG)",
            "Bundes-Immissionsschutzgesetz (BImSchG)",
            "LkSG - Lieferkettensorgfaltspflichtengesetz",
        ),
        esg_framework="EU Taxonomy, SFDR, CSRD, Deutscher Nachhaltigkeitskodex (DNK)",
        tax_id="Steuernummer",
        currency="EUR",
    ),
    "usa": LegalFramework(
        governing_law="Uniform Commercial Code (UCC), State Laws, Federal Law",
        arbitration="American Arbitration Association (AAA), JAMS",
        data_protection="CCPA (California), HIPAA, State Privacy Laws",
        signature_requirements="ESIGN Act, UETA, State Electronic Signature Laws",
        specific_laws=(
            "Uniform Commercial Code (UCC)",
            "Defend Trade Secrets Act (DTSA)",
            "California Consumer Privacy Act (CCPA)",
            "Lanham Act (Trademark Law)",
            "Sherman Antitrust Act",
            "Foreign Corrupt Practices Act (FCPA)",
            "Sarbanes-Oxley Act (SOX)",
            "Resource Conservation and Recovery Act (RCRA)",
            "Clean Air Act",
            "Delaware General Corporation Law",
        ),
        esg_framework="SEC Climate Disclosure, SASB Standards, GRI, TCFD, CDP",
        tax_id="EIN",
        currency="USD",
    ),
    "australia": LegalFramework(
        governing_law="Australian Contract Law, Competition and Consumer Act 2010",
        arbitration="Australian Centre for International Commercial Arbitration (ACICA)",
        data_protection="Privacy Act 1988, Australian Privacy Principles",
        signature_requirements="Electronic Transactions Act 1999",
        specific_laws=(
            "Corporations Act 2001 (Cth)",
            "Competition and Consumer Act 2010",
            "Privacy Act 1988",
            "Australian Consumer Law",
            "Trade Marks Act 1995",
            "Patents Act 1990",
            "Environment Protection and Biodiversity Conservation Act 1999",
            "National Greenhouse and Energy Reporting Act 2007",
            "Work Health and Safety Act 2011",
            "Modern Slavery Act 2018",
        ),
        esg_framework="ASX Corporate Governance Council Principles, ASIC Regulatory Guide 247",
        tax_id="ABN",
        currency="AUD",
    ),
    "mexico": LegalFramework(
        governing_law="Código Civil Federal, Código de Comercio",
        arbitration="Centro de Arbitraje de México (CAM)",
        data_protection="Ley Federal de Protección de Datos Personales (LFPDPPP)",
        signature_requirements="Código de Comercio (firma electrónica)",
        specific_laws=(
            "Código de Comercio",
            "Código Civil Federal",
            "Ley Federal de Protección de Datos Personales (LFPDPPP)",
            "Ley de la Propiedad Industrial",
            "Ley Federal de Competencia Económica",
            "Ley General del Equilibrio Ecológico y Protección al Ambiente",
            "Ley General para la Prevención y Gestión Integral de los Residuos",
            "Ley General de Sociedades Mercantiles",
            "Ley de Inversión Extranjera",
            "Ley General de Cambio Climático",
        ),
        esg_framework="BMV Sustainability Index, CNBV ESG Guidelines",
        tax_id="RFC",
        currency="MXN",
    ),
    "china": LegalFramework(
        governing_law="Civil Code of the People's Republic of China",
        arbitration="China International Economic and Trade Arbitration Commission (CIETAC)",
        data_protection="Personal Information Protection Law (PIPL), Cybersecurity Law",
        signature_requirements="Electronic Signature Law of the PRC",
        specific_laws=(
            "Civil Code of the PRC (2020)",
            "Personal Information Protection Law (PIPL)",
            "Cybersecurity Law of the PRC",
            "Data Security Law",
            "Patent Law of the PRC",
            "Anti-Unfair Competition Law",
            "Environmental Protection Law",
            "Company Law of the PRC",
            "Foreign Investment Law",
            "Circular Economy Promotion Law",
        ),
        esg_framework="CSRC ESG Disclosure, China Green Bond Standards, CBIRC Green Finance Guidelines",
        tax_id="统一社会信用代码",
        currency="CNY",
    ),
    "uk": LegalFramework(
        governing_law="English Common Law, Companies Act 2006",
        arbitration="London Court of International Arbitration (LCIA)",
        data_protection="UK GDPR, Data Protection Act 2018",
        signature_requirements="Electronic Communications Act 2000, eIDAS",
        specific_laws=(
            "Companies Act 2006",
            "UK GDPR",
            "Data Protection Act 2018",
            "Bribery Act 2010",
            "Modern Slavery Act 2015",
            "Competition Act 1998",
            "Consumer Rights Act 2015",
            "Environment Act 2021",
            "Climate Change Act 2008",
            "Financial Services and Markets Act 2000",
        ),
        esg_framework="UK Corporate Governance Code, Streamlined Energy and Carbon Reporting (SECR)",
        tax_id="Company Registration Number",
        currency="GBP",
    ),
    "france": LegalFramework(
        governing_law="Code Civil, Code de Commerce",
        arbitration="ICC International Court of Arbitration (Paris)",
        data_protection="GDPR, Loi Informatique et Libertés",
        signature_requirements="eIDAS Regulation, Signature Électronique Qualifiée",
        specific_laws=(
            "Code Civil",
            "Code de Commerce",
            "GDPR - RGPD",
            "Loi Informatique et Libertés",
            "Loi Sapin II (Anticorruption)",
            "Loi sur le Devoir de Vigilance",
            "Code de la Propriété Intellectuelle",
            "Code de l'Environnement",
            "Loi PACTE 2019",
            "Loi Climat et Résilience 2021",
        ),
        esg_framework="Article 29 LEC, Label ISR, DPEF (Déclaration de Performance Extra-Financière)",
        tax_id="SIRET",
        currency="EUR",
    ),
    "japan": LegalFramework(
        governing_law="Japanese Civil Code, Companies Act",
        arbitration="Japan Commercial Arbitration Association (JCAA)",
        data_protection="Act on Protection of Personal Information (APPI)",
        signature_requirements="Electronic Signatures and Certification Business Act",
        specific_laws=(
            "Japanese Civil Code",
            "Companies Act",
            "Act on Protection of Personal Information (APPI)",
            "Antimonopoly Act",
            "Unfair Competition Prevention Act",
            "Patent Act",
            "Basic Environment Act",
            "Waste Management and Public Cleansing Act",
            "Act on Promotion of Resource Circulation",
            "Act on Promotion of Global Warming Countermeasures",
        ),
        esg_framework="Japan Corporate Governance Code, TCFD Consortium Japan, JPX ESG Indices",
        tax_id="法人番号",
        currency="JPY",
    ),
    "india": LegalFramework(
        governing_law="Indian Contract Act 1872, Companies Act 2013",
        arbitration="Mumbai Centre for International Arbitration (MCIA)",
        data_protection="Digital Personal Data Protection Act 2023, IT Act 2000",
        signature_requirements="Information Technology Act 2000, Digital Signature",
        specific_laws=(
            "Indian Contract Act 1872",
            "Companies Act 2013",
            "Digital Personal Data Protection Act 2023",
            "Information Technology Act 2000",
            "Competition Act 2002",
            "Consumer Protection Act 2019",
            "Patents Act 1970",
            "Environment Protection Act 1986",
            "Prevention of Corruption Act 1988",
            "Foreign Exchange Management Act 1999",
        ),
        esg_framework="SEBI BRSR, National Guidelines on Responsible Business Conduct",
        tax_id="GSTIN/PAN",
        currency="INR",
    ),
}

DOCUMENT_TYPE_ADDONS: dict[str, str] = {
    "feasibility_study": """
CÁLCULOS DE VIABILIDADE FINANCEIRA OBRIGATÓRIOS:
- ROI (Return on Investment) = (Ganho Líquido - Investimento Inicial) / Investimento Inicial × 100
- NPV (Net Present Value) = Σ [CFt / (1 + r)^t] - C0
- IRR (Internal Rate of Return) = Taxa onde NPV = 0
- Payback Period = Investimento Inicial / Fluxo de Caixa Anual
- EBITDA Margin = EBITDA / Receita Líquida × 100
- Break-even Point = Custos Fixos / (Preço Unitário - Custo Variável Unitário)
FORMATAÇÃO DE NÚMEROS: Use o padrão do país
""",
    "sustainability_report": """
MÉTRICAS ESG OBRIGATÓRIAS:
- Emissões de GEE (Escopos 1, 2 e 3) em tCO2e
- Redução de CO2 = Volume Reciclado × Fator de Emissão (≈ 0,7 tCO2e/ton para pneus)
- Consumo de Água (m³/ton produzida)
- Taxa de Reciclagem (%)
- Economia Circular: % de materiais recuperados
- Taxa de Acidentes de Trabalho (LTIFR)
FRAMEWORKS: {esg_framework}
""",
    "carbon_credit": """
CÁLCULOS DE CRÉDITOS DE CARBONO:
- Créditos Gerados = Volume (ton) × Fator de Emissão × Fator de Additionality
- Valor dos Créditos = Créditos × Preço por tCO2e
- Verificação: VCS (Verra), Gold Standard, ou metodologia aprovada
- Período de Credenciamento: mínimo 7 anos, renovável
""",
    "environmental_improvement": """
MÉTRICAS AMBIENTAIS:
- Redução de Resíduos (%)
- Taxa de Desvio de Aterro (%)
- Eficiência Energética (kWh/ton)
- Uso de Energia Renovável (%)
- Pegada Hídrica (m³)
- Economia Circular: taxa de circularidade (%)
""",
}

DOCUMENT_LANGUAGES: dict[str, str] = {
    "pt": "Português brasileiro formal e jurídico",
    "en": "Formal business English",
    "es": "Español formal jurídico",
    "it": "Italiano formale giuridico",
    "zh": "正式商务中文",
}


def framework_for(country: str) -> LegalFramework:
    """Unknown countries fall back to the Brazilian framework."""
    return LEGAL_FRAMEWORKS.get((country or "").lower(), LEGAL_FRAMEWORKS["brazil"])


def type_addon(document_type: str, framework: LegalFramework) -> str:
    addon = DOCUMENT_TYPE_ADDONS.get(document_type, "")
    return addon.replace("{esg_framework}", framework.esg_framework)
