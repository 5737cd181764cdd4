"""
Layout engine

Pure document-layout logic: page ranges, coordinate mapping, the in-place
editing model, pagination of tall rasters and paragraph reconstruction.
Nothing here touches a PDF library; see the pdf_processor package.
"""
