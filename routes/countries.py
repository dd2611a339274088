"""Country endpoints under /api/countries."""

from typing import List

from fastapi import APIRouter, Depends

from api import get_catalog, render, render_list
from dal import Catalog
from schemas import AuthorOut, CountryIn, CountryOut

router = APIRouter(prefix="/api/countries", tags=["countries"])


@router.get("", response_model=List[CountryOut])
def list_countries(catalog: Catalog = Depends(get_catalog)):
    return render_list(catalog.countries.list())


@router.get("/authors/{author_id}", response_model=CountryOut)
def country_of_author(author_id: int, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.country_of_author(author_id))


@router.get("/{country_id}", response_model=CountryOut)
def get_country(country_id: int, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.countries.get(country_id))


@router.get("/{country_id}/authors", response_model=List[AuthorOut])
def authors_of_country(country_id: int, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.authors_of_country(country_id))


@router.post("", status_code=201, response_model=CountryOut)
def create_country(body: CountryIn, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.countries.create(body.model_dump(exclude={"id"})))


@router.put("/{country_id}", status_code=204)
def update_country(country_id: int, body: CountryIn, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.countries.update(country_id, body.model_dump()))


@router.delete("/{country_id}", status_code=204)
def delete_country(country_id: int, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.countries.delete(country_id))
