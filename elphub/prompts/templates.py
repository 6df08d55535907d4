"""Prompt templates for the AI hub and the competitor analysis functions."""

from __future__ import annotations

from string import Template

COMPANY_PROFILE = """\
ELP Green Technology - empresa especializada em:
- Reciclagem de pneus OTR (fora de estrada) e convencionais
- Tecnologia de pirólise para recuperação de materiais
- Soluções de economia circular e sustentabilidade
- Parcerias com mineradoras e indústrias
- Sede: Brasil, com atuação internacional
- Contato: info@elpgreen.com | www.elpgreen.com"""

# --- AI hub actions ---

NEWS_SUMMARY = Template("""\
Você é um especialista em notícias sobre reciclagem, ESG e economia circular.

Pesquise e resuma as últimas notícias relevantes sobre o seguinte tópico:
TÓPICO: $topic

CONTEXTO: ELP Green Technology é uma empresa focada em reciclagem de pneus OTR (fora de estrada), \
pirólise e economia circular no Brasil e internacionalmente.

Forneça:
1. **Resumo Executivo** (2-3 parágrafos sobre as principais notícias)
2. **Pontos-Chave** (5-7 bullet points com os destaques)
3. **Tendências Identificadas** (análise de tendências do setor)
4. **Oportunidades para ELP Green** (como a empresa pode se beneficiar)

Use um tom profissional e corporativo. Formate em Markdown.""")

TRANSLATE_TEXT = Template("""\
Traduza o seguinte texto para $language.
Mantenha o tom profissional e o significado original.

TEXTO:
$text

TRADUÇÃO:""")

CORRECT_GRAMMAR = Template("""\
Você é um revisor de textos especializado em documentos empresariais.

TAREFA: Corrija gramática, ortografia e formatação do texto abaixo.

REGRAS:
1. Mantenha o significado e tom original
2. Use estilo $style_guide
3. Corrija erros de português (acentuação, concordância, pontuação)
4. Melhore a clareza e legibilidade
5. NÃO adicione conteúdo novo
6. NÃO remova informações
7. Mantenha a estrutura de seções e listas
8. Formate corretamente: seções em MAIÚSCULAS, listas com "-", checkboxes com "☐"

TEXTO ORIGINAL:
$text

TEXTO CORRIGIDO (apenas o texto, sem explicações):""")

EXECUTIVE_SUMMARY = Template("""\
Você é um executivo sênior especializado em análises empresariais.

TAREFA: Gere um resumo executivo conciso do texto abaixo.

REGRAS:
1. Máximo de $max_lines linhas
2. Capture os pontos mais importantes
3. Use tom profissional e objetivo
4. Destaque: objetivo principal, decisões tomadas e próximos passos
5. Escreva em $language
6. Não use markdown ou formatação especial

TEXTO:
$text

RESUMO EXECUTIVO ($max_lines linhas máximo):""")

CLASSIFY_FALLBACK = Template(
    'Classify this text into these categories: $labels. Text: "$text". '
    'Return ONLY valid JSON array: [{"label":"category","score":0.95}]'
)

TRANSLATE_FORMATTING_RULES = """
FORMATTING RULES (MANDATORY):
- Keep EXACTLY the same structure (same number of sections, paragraphs, lines)
- Translate sections in UPPERCASE to UPPERCASE in target language (except Chinese which has no uppercase)
- Keep lists with "-" or "•" in the same format
- Preserve checkboxes "☐" and their position
- Keep item numbering (1., 2., etc.)
- Preserve line breaks and spacing
- NEVER add content that wasn't in the original
- NEVER remove content from the original
- NEVER add markdown or formatting not in the original"""

TRANSLATE_DOCUMENT = Template('''\
You are a STRICT translator. Your ONLY job is to translate text word-by-word.

ABSOLUTE RULES - VIOLATION WILL FAIL THE TASK:
1. Output ONLY the translated text - NOTHING ELSE
2. NEVER add explanations, introductions, context, or commentary
3. NEVER invent or hallucinate new content
4. NEVER expand short texts into longer documents
5. If input is 10 words, output must be approximately 10 words
6. If input is 1 sentence, output must be 1 sentence
7. Preserve proper names (Ericson Piccoli, ELP Green Technology, TOPS, ABM)
8. Preserve acronyms (ESG, OTR, CTRA, etc.)
9. Keep formal business tone

LANGUAGE-SPECIFIC INSTRUCTIONS:
$instructions
$formatting_rules

TRANSLATE TO: $language

INPUT TEXT (translate ONLY this, nothing more):
"""
$text
"""

OUTPUT (translated text only, same length as input):''')

GENERATE_DOCUMENT = Template('''\
Você é um especialista em direito internacional, negócios e elaboração de documentos empresariais profissionais.

TAREFA: Criar um(a) $template baseado(a) na seguinte descrição:

DESCRIÇÃO DO DOCUMENTO SOLICITADO:
"""
$description
"""

CONTEXTO DA EMPRESA:
$company
$research
REQUISITOS OBRIGATÓRIOS:
1. Escreva em $language
2. Use formatação profissional com seções em MAIÚSCULAS
3. Inclua cabeçalho com identificação do documento
4. Mantenha tom formal, jurídico e profissional
5. Seja específico e detalhado
6. Inclua cláusulas e termos adequados ao tipo de documento
7. Adicione data, local e espaço para assinaturas
8. Se relevante, cite leis e regulamentações aplicáveis
9. Estruture com: INTRODUÇÃO/OBJETO, TERMOS E CONDIÇÕES, OBRIGAÇÕES DAS PARTES, DISPOSIÇÕES FINAIS, ASSINATURAS
10. Formate listas com "-" e checkboxes com "☐"

IMPORTANTE: Gere o documento completo e pronto para uso. Não adicione explicações ou comentários sobre o documento.

DOCUMENTO:''')

WEB_RESEARCH_BLOCK = Template('''
PESQUISA WEB RELEVANTE (use como referência):
"""
$research
"""
''')

CORRECT_DOCUMENT = Template('''\
Você é um ESPECIALISTA JURÍDICO INTERNACIONAL e um MESTRE em elaboração de documentos empresariais de altíssimo nível.

TAREFA CRÍTICA: Corrija, expanda e aprimore COMPLETAMENTE o documento abaixo para criar um $type_name \
PROFISSIONAL, JURIDICAMENTE VINCULATIVO e EXAUSTIVO.

DOCUMENTO ORIGINAL PARA CORREÇÃO:
"""
$text
"""

REQUISITOS OBRIGATÓRIOS (TODOS DEVEM SER CUMPRIDOS):

1. **VOLUME MÍNIMO**: O documento DEVE ter NO MÍNIMO $min_chars caracteres (aproximadamente $pages páginas A4)

2. **ESTRUTURA COMPLETA OBRIGATÓRIA**:
   - CABEÇALHO: Identificação completa do documento, número, data
   - CONSIDERANDOS/RECITAIS: Mínimo 15-20 "CONSIDERANDO QUE" detalhados
   - DEFINIÇÕES: Mínimo 30 definições técnicas e jurídicas
   - OBJETO: Descrição exaustiva do propósito
   - CLÁUSULAS: Mínimo 40 artigos/cláusulas detalhados com sub-cláusulas
   - ANEXOS: Mínimo 3 anexos técnicos detalhados
$type_addon
3. **CLÁUSULAS JURÍDICAS OBRIGATÓRIAS** (incluir TODAS):
   - Objeto e escopo detalhado, definições exaustivas
   - Obrigações e direitos de cada parte (mínimo 10 por parte)
   - Preço, pagamento, prazo e vigência
   - Confidencialidade (NDA completo integrado) e propriedade intelectual
   - Proteção de dados pessoais ($data_protection)
   - Compliance e anticorrupção (FCPA, UK Bribery Act, Lei 12.846/2013)
   - Responsabilidades, garantias, indenizações e seguros
   - Força maior, rescisão, penalidades e multas
   - Foro e lei aplicável ($governing_law)
   - Arbitragem ($arbitration)
   - Notificações, cessão, integralidade, renúncia e disposições finais

4. **CLÁUSULAS ESG E SUSTENTABILIDADE** (OBRIGATÓRIAS):
   - Compromissos ambientais, responsabilidade social e governança corporativa
   - Direitos humanos, cadeia de suprimentos sustentável e relatórios ESG
   - Metas de carbono neutro, economia circular, due diligence e auditorias ambientais

5. **CONFORMIDADE LEGAL DO PAÍS**: $country
   - Lei aplicável: $governing_law
   - Arbitragem: $arbitration
   - Proteção de dados: $data_protection
   - Requisitos de assinatura: $signature_requirements
   - Framework ESG: $esg_framework
   - Identificação fiscal: $tax_id
   - Moeda: $currency
   - Referências adicionais: $laws_text

6. **REFERÊNCIAS LEGAIS ESPECÍFICAS** (citar pelo menos 15):
$law_list

7. **IDIOMA**: $language

8. **FORMATAÇÃO**:
   - Seções em MAIÚSCULAS e negrito
   - Artigos numerados (Art. 1°, Art. 2°, etc.), parágrafos com §, alíneas com a), b), c)
   - Listas com "-" e checkboxes com "☐" para ações pendentes
   - Tabelas para dados financeiros e métricas
   - Números formatados conforme padrão local ($currency)

9. **ASSINATURAS**:
   - Campo para data e local, espaço para cada parte e para testemunhas (mínimo 2)
   - Conforme $signature_requirements

IMPORTANTE:
- Mantenha TODO o conteúdo original, apenas EXPANDA e APRIMORE
- NÃO remova nenhuma informação do documento original
- Use linguagem jurídica precisa e cite artigos de lei quando apropriado
- O documento deve estar PRONTO PARA ASSINATURA

GERE O DOCUMENTO COMPLETO AGORA (mínimo $min_chars caracteres):''')

EXPAND_DOCUMENT = Template('''\
O documento abaixo está incompleto. EXPANDA-O para atingir NO MÍNIMO $min_chars caracteres.

DOCUMENTO ATUAL ($current_chars caracteres):
"""
$document
"""

ADICIONE:
1. Mais considerandos detalhados
2. Mais definições técnicas
3. Mais cláusulas de compliance e ESG
4. Mais detalhes em cada artigo existente
5. Mais obrigações específicas para cada parte
6. Mais disposições sobre propriedade intelectual
7. Mais cláusulas de proteção de dados
8. Anexos detalhados

GERE O DOCUMENTO EXPANDIDO COMPLETO:''')

# --- Competitor analysis ---

COMPETITOR_ANALYSIS = """\
Você é um analista sênior de inteligência empresarial.
Analise os dados coletados dos sites de concorrentes abaixo.
Extraia e estruture em JSON válido:
{
  "precos_produtos": [array de objetos {produto: string, preco: string, url: string}],
  "estrategias_marketing": [array de strings],
  "reclamacoes_clientes": [array de strings],
  "oportunidades_diferencial": [array de strings]
}
Depois do JSON, gere um resumo executivo em português (máx 400 palavras)."""

STRUCTURED_COMPETITOR_ANALYSIS = """\
Você é um analista sênior de inteligência empresarial.
Analise os dados coletados de sites de concorrentes.
Extraia e responda SOMENTE em JSON válido:
{
  "dados_empresa": {
    "razao_social": "nome completo da empresa ou null",
    "cnpj_registro": "número de registro/CNPJ/Tax ID ou null",
    "endereco": "endereço completo ou null",
    "telefones": ["lista de telefones encontrados"],
    "emails": ["lista de emails encontrados"],
    "website": "URL do site oficial ou null"
  },
  "diretoria": [
    {"nome": "nome do diretor", "cargo": "cargo/função", "linkedin": "URL linkedin ou null"}
  ],
  "perfil_empresa": "descrição do que a empresa faz, setor, tamanho estimado",
  "resumo_executivo": "string com 2-3 parágrafos resumindo os principais achados",
  "precos_produtos": [{"produto": "string", "preco": "string", "url": "string"}],
  "estrategias_marketing": ["string"],
  "reclamacoes_clientes": ["string"],
  "oportunidades_diferencial": ["string"],
  "pontos_fortes": ["string"],
  "pontos_fracos": ["string"]
}

IMPORTANTE: Busque ativamente por:
- Número de registro comercial (CNPJ, Tax ID, Company Number)
- Telefones de contato
- Nomes de diretores, CEOs, fundadores e executivos
- Endereço da sede

Não adicione texto extra fora do JSON.

Conteúdo:
"""

GROQ_ANALYST_SYSTEM = (
    "Você é um analista de BI especializado. Responda sempre em português brasileiro. "
    "Forneça análises estruturadas e acionáveis."
)

COMPLEMENT_ANALYSIS = """\
Valide e complemente a análise anterior.
Resuma os pontos principais em bullet points em português.
Sugira exatamente 3 gráficos úteis para um dashboard de BI (ex: linha de preços, barra de reclamações, radar de oportunidades).
Responda apenas com o resumo em bullets + as 3 sugestões de gráficos."""

COMPLEMENT_WITH_ADDITIONAL_TEXT = Template("""\
TAREFA: COMPLEMENTAR análise com TODOS os dados do texto adicional.

REGRAS ABSOLUTAS:
1. NÃO RESUMA - liste TUDO na íntegra
2. Se há 50 empresas, liste as 50 COM SEUS SITES
3. NÃO use "etc", "entre outros", "principais"
4. CADA empresa DEVE ter seu site ao lado

FORMATO OBRIGATÓRIO:

## DADOS DO TEXTO ADICIONAL

### Informações Institucionais
[Copie missão, visão, valores, histórico COMPLETOS]

### Governança
[Órgãos, pessoas, cargos]

### Links Oficiais
[TODOS os links com descrições]

### Empresas Mantenedoras (TABELA COMPLETA)
| Empresa | Site |
|---------|------|

### Empresas Associadas (TABELA COMPLETA - TODAS COM SITES!)
| Empresa | Site |
|---------|------|

### Outros Dados
[Informações adicionais]

---

## ANÁLISE INTEGRADA
[Insights combinando dados web + texto adicional]

## SUGESTÕES DE GRÁFICOS
1. [Gráfico 1]
2. [Gráfico 2]
3. [Gráfico 3]

=== TEXTO ADICIONAL FORNECIDO PELO USUÁRIO (ANALISE TUDO!) ===
$additional_text
=== FIM DO TEXTO ADICIONAL ===

Agora analise DETALHADAMENTE o texto acima, extraia TODOS os dados e integre com a análise anterior:""")

TRUNCATION_MARKER = "\n\n[... conteúdo truncado ...]"
