"""
Base LaTeX resume template handed to the model.

The preamble defines the small command set the model is told to use:
``\\resumeheader``, ``\\resumecontact``, ``\\section``, ``\\entry``,
``\\singlelineentry``, ``\\desc`` and ``\\bullets``. The preview renderer
understands the same commands.
"""

TEMPLATE_COMMANDS = (
    r"\resumeheader",
    r"\resumecontact",
    r"\section",
    r"\entry",
    r"\singlelineentry",
    r"\desc",
    r"\bullets",
)

LATEX_TEMPLATE = r"""
\documentclass[a4paper,11pt]{article}
\usepackage{latexsym}
\usepackage{amsmath}
\usepackage{amssymb}
\usepackage{graphicx}
\usepackage{url}
\usepackage[usenames,dvipsnames]{xcolor}
\usepackage[left=0.75in,top=0.6in,right=0.75in,bottom=0.6in]{geometry}
\usepackage{enumitem}
\usepackage{charter}
\usepackage[T1]{fontenc}
\usepackage{tabularx}
\usepackage{hyperref}
\hypersetup{
    colorlinks=true,
    linkcolor=blue,
    filecolor=magenta,
    urlcolor=blue,
    pdftitle={Your Name - Resume},
    pdfpagemode=FullScreen,
}

\urlstyle{same}

\raggedbottom
\raggedright
\setlength{\tabcolsep}{0in}

\newlist{innerlist}{itemize}{1}
\setlist[innerlist]{label=\textbullet, leftmargin=*, nosep, partopsep=0pt, topsep=0pt}

%---- SECTIONING ----
\newcounter{sec}
\renewcommand{\section}[1]{
  \refstepcounter{sec}
  \par\vspace{8.5pt}
  {\Large\bfseries #1}
  \par\vspace{8.5pt}
  \hrule
  \vspace{8pt}
}

%---- CUSTOM COMMANDS ----
\newcommand{\resumeheader}[1]{ % Name
    {\Huge\bfseries #1}
}
\newcommand{\resumecontact}[1]{ % Contact info
    {\large #1}
}
\newcommand{\entry}[4]{ % {Left-aligned} {Right-aligned} {body} {spacing}
    \parbox{\textwidth}{
        {\textbf{#1} \hfill #2}
        \ifx&#3&\else
            \\[#4]
            #3
        \fi
    }
}
\newcommand{\singlelineentry}[2]{ % {left} {right}
    \parbox{\textwidth}{
        {\textbf{#1} \hfill #2}
    }
}
\newcommand{\desc}[1]{
    \begin{itemize}[leftmargin=*, nosep]
        \item #1
    \end{itemize}
}
\newcommand{\bullets}[1]{
    \begin{itemize}[leftmargin=*, nosep]
        #1
    \end{itemize}
}

%---- DOCUMENT START ----
\begin{document}
\begin{center}
    \resumeheader{YOUR NAME}
    \vspace{12pt}
    \resumecontact{
        your.email@example.com $|$ 555-123-4567 $|$ your-website.com \\
        linkedin.com/in/yourusername $|$ github.com/yourusername
    }
\end{center}

%-----------  SUMMARY  -----------
\section{Summary}

A highly motivated and results-oriented software developer with over 5 years of experience in building and maintaining web applications. Proficient in JavaScript, React, and Node.js.

%----------- EXPERIENCE -----------
\section{Experience}

\entry{Software Engineer, Apple}{Cupertino, CA}
{
    \bullets{
        \item Reduced time to render user buddy lists by 75\% by implementing a prediction algorithm.
        \item Integrated iChat with Spotlight Search by creating a tool to extract metadata from saved chat transcripts.
    }
}{0pt}
\vspace{8pt}

%----------- EDUCATION -----------
\section{Education}

\entry{University of Pennsylvania}{Philadelphia, PA}
{\textbf{BS in Computer Science}}{Sept 2000 -- May 2005}
\vspace{4pt}
\desc{GPA: 3.9/4.0}

%----------- PROJECTS -----------
\section{Projects}

\singlelineentry{My Awesome Project}{github.com/your/repo}
\bullets{
    \item Built a thing that does a thing and it was awesome.
    \item Used React, Node.js, and a whole lot of coffee.
}

\end{document}
""".strip()
